"""URL extraction from free-form shared text."""

from __future__ import annotations

import re

from url_inbox.services.url_normalizer import normalize_url_token

# General web-URL matcher: optional scheme and userinfo, a dotted host ending in
# an alphabetic TLD (or an IPv4 address), optional port, then path/query/fragment.
# Scheme-less matches only start at a host boundary, which keeps matching linear
# on long dotted runs.
WEB_URL_RE = re.compile(
    r"""
    (?:
        (?:https?|rtsp)://
        (?:[\w\-.~!$&'()*+,;=:%]+@)?
        |
        (?<![\w.@-])
    )
    (?:
        (?:[^\W_](?:[\w-]{0,61}[^\W_])?\.)+[^\W\d_]{2,63}
        |
        (?:\d{1,3}\.){3}\d{1,3}
    )
    (?::\d{1,5})?
    (?:[/?#][^\s<>"]*)?
    """,
    re.IGNORECASE | re.VERBOSE,
)

WHITESPACE_RE = re.compile(r"\s+")


def extract_urls(text: str | None) -> list[str]:
    """Scan shared text for URLs.

    The regex pass finds anything shaped like a web URL; the whitespace pass only
    adds scheme-less social links (``x.com/...``) the regex alone would drop.

    Args:
        text: Free-form share text.

    Returns:
        Normalized URLs in first-seen order with no duplicates.
    """
    if not text:
        return []

    found: dict[str, None] = {}
    for match in WEB_URL_RE.finditer(text):
        normalized = normalize_url_token(match.group(0))
        if normalized is not None:
            found.setdefault(normalized, None)

    for token in WHITESPACE_RE.split(text):
        normalized = normalize_url_token(token)
        if normalized is not None:
            found.setdefault(normalized, None)

    return list(found)
