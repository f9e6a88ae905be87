"""Tracking-link helpers: payload decoding, parameter stripping, URL keys.

All functions are pure and fail open: anything they cannot parse is
returned unchanged.
"""

import base64
import binascii
import logging
import re
from urllib.parse import parse_qsl, unquote, urlencode, urlunsplit

from .urls import host_matches, parse_url, path_segments

logger = logging.getLogger(__name__)

# Mail platforms whose click links carry the destination as a base64 path segment
TRACKING_DOMAINS = (
    "kit-mail6.com",
    "kit-mail.com",
    "convertkit-mail.com",
    "convertkit-mail2.com",
)

TRACKING_PARAMS = frozenset(
    {
        "ref",
        "affiliate",
        "aff",
        "source",
        "campaign",
        "fbclid",
        "gclid",
        "mc_cid",
        "mc_eid",
        "_hsenc",
        "_hsmi",
        "mkt_tok",
        "next",  # bookshop.org
        "r",
        "token",  # substack
    }
)


def try_decode_tracking_url(url: str) -> str:
    """Decode the real destination out of a known tracking link.

    Only hosts under TRACKING_DOMAINS are considered. The last non-empty path
    segment is base64-decoded (standard or URL-safe alphabet, padding
    optional); the result is returned only if it is an http(s) URL.
    """
    try:
        parts = parse_url(url)
    except ValueError:
        return url

    if not any(host_matches(parts.hostname, domain) for domain in TRACKING_DOMAINS):
        return url

    segments = path_segments(parts.path)
    if not segments:
        return url

    encoded = unquote(segments[-1]).replace("-", "+").replace("_", "/")
    encoded += "=" * (-len(encoded) % 4)
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return url

    if decoded.startswith(("http://", "https://")):
        logger.debug("[TRACKING] Decoded %s -> %s", url, decoded)
        return decoded
    return url


def _is_tracking_param(name: str) -> bool:
    return name.startswith("utm_") or name in TRACKING_PARAMS


def strip_tracking_params(url: str) -> str:
    """Remove utm_* and other tracking query parameters from a URL.

    Remaining parameters keep their order; an emptied query leaves no
    trailing '?'.
    """
    try:
        parts = parse_url(url)
    except ValueError:
        return url

    if not parts.query:
        return urlunsplit(parts)

    params = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(name, value) for name, value in params if not _is_tracking_param(name)]
    if len(kept) == len(params):
        return url

    return urlunsplit(parts._replace(query=urlencode(kept)))


def base_url(url: str) -> str:
    """Scheme, host and path only; the key used for deduplication."""
    try:
        parts = parse_url(url)
    except ValueError:
        return url.split("#")[0].split("?")[0]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def title_from_url(url: str) -> str:
    """Build a readable title from the last path segment of a URL.

    "https://a.com/posts/my-first_post.html" -> "My First Post".
    Falls back to the hostname when the path is empty.
    """
    try:
        parts = parse_url(url)
    except ValueError:
        return url

    segments = path_segments(parts.path)
    if not segments:
        return parts.hostname

    stem = re.sub(r"\.[^.]+$", "", segments[-1])
    words = re.sub(r"[-_]", " ", stem).split(" ")
    title = " ".join(word[:1].upper() + word[1:] for word in words)
    return title or parts.hostname
