"""Tests for URL extraction from shared text."""

import time

from url_inbox.services.url_extraction import extract_urls


def test_extracts_single_url_from_text():
    assert extract_urls("Check this out\nhttps://a.com/1") == ["https://a.com/1"]


def test_preserves_first_seen_order_without_duplicates():
    text = "https://b.com/2 then https://a.com/1 and again https://b.com/2."
    assert extract_urls(text) == ["https://b.com/2", "https://a.com/1"]


def test_schemeless_social_links_are_found():
    text = "Look at x.com/user/status/42 and threads.net/@someone/post/9"
    assert extract_urls(text) == [
        "https://x.com/user/status/42",
        "https://threads.net/@someone/post/9",
    ]


def test_ordinary_bare_domains_are_ignored():
    assert extract_urls("I read example.com today, it was fine.") == []


def test_trailing_punctuation_is_dropped():
    assert extract_urls("Read (https://a.com/article)!") == ["https://a.com/article"]


def test_url_glued_to_preceding_word():
    assert extract_urls("링크:https://cafe.naver.com/abc/123") == ["https://cafe.naver.com/abc/123"]


def test_query_and_fragment_are_kept():
    assert extract_urls("go https://a.com/p?x=1&y=Z#frag now") == ["https://a.com/p?x=1&y=Z#frag"]


def test_empty_and_none_text():
    assert extract_urls("") == []
    assert extract_urls(None) == []
    assert extract_urls("no links here") == []


def test_zero_width_space_inside_url_is_removed():
    assert extract_urls("x.com/abc\u200b is great") == ["https://x.com/abc"]


def test_result_never_contains_duplicates():
    text = "\n".join(["https://a.com/1", "x.com/q", "https://x.com/q", "https://a.com/1"] * 3)
    urls = extract_urls(text)
    assert len(urls) == len(set(urls))
    assert urls == ["https://a.com/1", "https://x.com/q"]


def test_scheme_glued_to_word_is_still_found():
    assert extract_urls("제목https://a.com/1") == ["https://a.com/1"]


def test_long_dotted_text_is_scanned_quickly():
    started = time.perf_counter()

    assert extract_urls("a." * 50_000) == []
    assert extract_urls("ab." * 30_000 + " https://a.com/1") == ["https://a.com/1"]

    assert time.perf_counter() - started < 2
