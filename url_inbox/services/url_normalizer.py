"""Token cleanup that turns a raw share token into a candidate URL."""

from __future__ import annotations

LEADING_STRIP_CHARS = "([{<\"'"
TRAILING_STRIP_CHARS = ")]}>\"',.!?;:"
INVISIBLE_CHARS = ("\u200b", "\u200c", "\u200d", "\ufeff")

HTTP_SCHEMES = ("http://", "https://")

# Social hosts that share sheets often emit without a scheme
SCHEMELESS_DOMAIN_PREFIXES = (
    "x.com/",
    "twitter.com/",
    "t.co/",
    "www.x.com/",
    "www.twitter.com/",
    "threads.net/",
    "www.threads.net/",
    "threads.com/",
    "www.threads.com/",
)


def _clean_token(raw: str) -> str:
    cleaned = raw.strip().lstrip(LEADING_STRIP_CHARS).rstrip(TRAILING_STRIP_CHARS)
    for char in INVISIBLE_CHARS:
        cleaned = cleaned.replace(char, "")
    return cleaned


def normalize_url_token(raw: str | None) -> str | None:
    """Clean a raw text token into a URL, or reject it.

    Args:
        raw: Token taken from shared text (a regex match or a whitespace split).

    Returns:
        The cleaned URL, or None when the token is blank or not URL-like.
        ``http``/``https`` tokens keep their host and path untouched (only the
        scheme is lower-cased); allow-listed bare social domains get ``https://``.
    """
    if not raw:
        return None
    cleaned = _clean_token(raw)
    if not cleaned.strip():
        return None

    lowered = cleaned.lower()
    for scheme in HTTP_SCHEMES:
        if lowered.startswith(scheme):
            return scheme + cleaned[len(scheme) :]

    if lowered.startswith(SCHEMELESS_DOMAIN_PREFIXES):
        return f"https://{cleaned}"
    return None
