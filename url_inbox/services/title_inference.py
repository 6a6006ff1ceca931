"""Title inference for shared links.

Share sheets rarely send a clean title. Some apps put it in the subject, some
prepend it to the URL ("Title\\nhttps://..."), and many send only the app name
("Instagram", "네이버 카페"). The heuristics here pick the most informative
candidate and strip trailing platform boilerplate such as " - YouTube".
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from url_inbox.core.settings import DEFAULT_GENERIC_TITLES, DEFAULT_TITLE_SUFFIXES, get_settings

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


@dataclass(frozen=True)
class TitleHeuristics:
    """Configurable label and suffix lists used by :func:`infer_title`.

    Attributes:
        generic_titles: Lower-case labels that carry no information on their own.
        title_suffixes: Trailing separator+platform strings removed from titles.
    """

    generic_titles: tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_GENERIC_TITLES))
    title_suffixes: tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_TITLE_SUFFIXES))

    @classmethod
    def from_lists(
        cls, generic_titles: Iterable[str], title_suffixes: Iterable[str]
    ) -> TitleHeuristics:
        return cls(
            generic_titles=tuple(label.strip().lower() for label in generic_titles if label.strip()),
            title_suffixes=tuple(suffix for suffix in title_suffixes if suffix),
        )

    @classmethod
    def from_settings(cls) -> TitleHeuristics:
        settings = get_settings()
        return cls.from_lists(settings.generic_titles, settings.title_suffixes)

    def is_generic(self, title: str) -> bool:
        """Return True when the title is just a platform/app name."""
        lower = title.lower().strip()
        return any(
            lower == label or lower.startswith(f"{label} ") or lower.endswith(f" {label}")
            for label in self.generic_titles
        )

    def strip_suffix(self, title: str) -> str:
        """Trim and drop one trailing platform suffix, if any."""
        result = title.strip()
        lower = result.lower()
        for suffix in self.title_suffixes:
            if lower.endswith(suffix.lower()):
                return result[: len(result) - len(suffix)].strip()
        return result


def remove_url(text: str, url: str) -> str:
    """Remove every occurrence of ``url`` from ``text``.

    Extracted URLs carry a lower-cased scheme, so the scheme part is matched
    case-insensitively; the rest of the URL must match exactly.
    """
    if not url:
        return text
    scheme = _SCHEME_RE.match(url)
    if scheme is None:
        return text.replace(url, "")
    pattern = f"(?i:{re.escape(scheme.group(0))}){re.escape(url[scheme.end() :])}"
    return re.sub(pattern, "", text)


def infer_title(
    text: str, url: str, subject: str = "", heuristics: TitleHeuristics | None = None
) -> str:
    """Pick the best human-readable title for a URL found in shared text.

    Args:
        text: The full shared text the URL was extracted from.
        url: The extracted URL.
        subject: Optional subject line sent alongside the text.
        heuristics: Label/suffix lists; defaults to the configured ones.

    Returns:
        The chosen title with platform suffixes removed, or "" when nothing fits.
    """
    rules = heuristics or TitleHeuristics.from_settings()
    text = text or ""
    subject = subject or ""

    if subject.strip() and not rules.is_generic(subject):
        return rules.strip_suffix(subject)

    remainder = remove_url(text, url).strip()

    # Apps like Naver Cafe share "title\nurl"
    for line in remainder.split("\n"):
        candidate = line.strip()
        if (
            candidate
            and not rules.is_generic(candidate)
            and not candidate.lower().startswith("http")
        ):
            return rules.strip_suffix(candidate)

    flattened = remainder.replace("\n", " ").strip()
    if flattened and not rules.is_generic(flattened):
        return rules.strip_suffix(flattened)

    if subject.strip():
        return rules.strip_suffix(subject)

    return ""
