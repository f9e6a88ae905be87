"""Mark newsletters as processed once their links have been handled.

The mailbox itself (IMAP connection, search) lives outside this package;
anything implementing MailboxClient can be passed in. Each mailbox operation
is retried with exponential backoff since mail servers drop connections and
time out regularly.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..utils.retry import RetryOptions, retry

logger = logging.getLogger(__name__)


class MailboxClient(Protocol):
    """The two mailbox operations the pipeline needs."""

    async def mark_as_read(self, uid: str) -> None: ...

    async def delete(self, uid: str) -> None: ...


@dataclass
class ProcessingOptions:
    """What to do with a newsletter after processing."""

    mark_as_read: bool = False
    auto_delete: bool = False
    dry_run: bool = False


async def mark_newsletter_as_processed(
    mailbox: MailboxClient,
    uid: str,
    options: ProcessingOptions,
    retry_options: Optional[RetryOptions] = None,
) -> None:
    """
    Mark a newsletter as read and/or delete it.

    Args:
        mailbox: Mailbox client
        uid: E-mail UID
        options: Which operations are enabled; dry runs touch nothing
        retry_options: Backoff configuration (default: from settings)

    Raises:
        RetryExhausted: If an operation keeps failing
    """
    if options.dry_run:
        logger.info("[MAIL] Dry run, leaving UID %s untouched", uid)
        return

    retry_options = retry_options or RetryOptions.from_settings()

    if options.mark_as_read:
        logger.debug("[MAIL] Marking UID %s as read", uid)
        await retry(lambda: mailbox.mark_as_read(uid), retry_options, f"mark UID {uid} as read")

    if options.auto_delete:
        logger.debug("[MAIL] Deleting UID %s", uid)
        await retry(lambda: mailbox.delete(uid), retry_options, f"delete UID {uid}")
