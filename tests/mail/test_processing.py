"""Tests for marking newsletters as processed."""

import asyncio

import pytest

from newsletter_links.mail.processing import ProcessingOptions, mark_newsletter_as_processed
from newsletter_links.utils.retry import RetryExhausted, RetryOptions

FAST = RetryOptions(max_attempts=3, initial_delay=0.001, max_delay=0.002)


class FakeMailbox:
    def __init__(self, read_failures: int = 0, delete_failures: int = 0):
        self.read_failures = read_failures
        self.delete_failures = delete_failures
        self.read_calls: list[str] = []
        self.delete_calls: list[str] = []

    async def mark_as_read(self, uid: str) -> None:
        self.read_calls.append(uid)
        if len(self.read_calls) <= self.read_failures:
            raise ConnectionError("IMAP connection dropped")

    async def delete(self, uid: str) -> None:
        self.delete_calls.append(uid)
        if len(self.delete_calls) <= self.delete_failures:
            raise TimeoutError("IMAP timeout")


class TestMarkNewsletterAsProcessed:
    def test_dry_run_touches_nothing(self):
        mailbox = FakeMailbox()
        options = ProcessingOptions(mark_as_read=True, auto_delete=True, dry_run=True)

        asyncio.run(mark_newsletter_as_processed(mailbox, "42", options, FAST))

        assert mailbox.read_calls == []
        assert mailbox.delete_calls == []

    def test_mark_as_read_only(self):
        mailbox = FakeMailbox()

        asyncio.run(
            mark_newsletter_as_processed(mailbox, "42", ProcessingOptions(mark_as_read=True), FAST)
        )

        assert mailbox.read_calls == ["42"]
        assert mailbox.delete_calls == []

    def test_nothing_enabled(self):
        mailbox = FakeMailbox()

        asyncio.run(mark_newsletter_as_processed(mailbox, "42", ProcessingOptions(), FAST))

        assert mailbox.read_calls == []
        assert mailbox.delete_calls == []

    def test_transient_failures_retried(self):
        mailbox = FakeMailbox(read_failures=2, delete_failures=1)
        options = ProcessingOptions(mark_as_read=True, auto_delete=True)

        asyncio.run(mark_newsletter_as_processed(mailbox, "42", options, FAST))

        assert mailbox.read_calls == ["42"] * 3
        assert mailbox.delete_calls == ["42"] * 2

    def test_persistent_failure_raises(self):
        mailbox = FakeMailbox(delete_failures=10)

        with pytest.raises(RetryExhausted, match="delete UID 42"):
            asyncio.run(
                mark_newsletter_as_processed(mailbox, "42", ProcessingOptions(auto_delete=True), FAST)
            )

        assert len(mailbox.delete_calls) == 3
