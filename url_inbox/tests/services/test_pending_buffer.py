"""Tests for the pending share buffer."""

import json
import logging
import threading

import pytest

from url_inbox.models.share import SharedItem
from url_inbox.services.kv_store import InMemoryKeyValueStore
from url_inbox.services.pending_buffer import PendingBuffer

SLOT = "pending_data"


def _items(*pairs):
    return [SharedItem(url=url, title=title) for url, title in pairs]


def test_missing_slot_reads_as_empty(pending_buffer):
    assert pending_buffer.peek() == []
    assert pending_buffer.drain() == []


def test_append_keeps_insertion_order(pending_buffer):
    pending_buffer.append(_items(("https://a.com/1", "A"), ("https://b.com/2", "B")))
    pending_buffer.append(_items(("https://c.com/3", "")))

    assert [item.url for item in pending_buffer.peek()] == [
        "https://a.com/1",
        "https://b.com/2",
        "https://c.com/3",
    ]


def test_duplicate_url_is_a_noop_and_first_title_wins(pending_buffer):
    pending_buffer.append(_items(("https://a.com/1", "First")))
    added = pending_buffer.append(_items(("https://a.com/1", "Second"), ("https://b.com/2", "")))

    assert [item.url for item in added] == ["https://b.com/2"]
    assert pending_buffer.peek()[0] == SharedItem(url="https://a.com/1", title="First")


def test_duplicates_within_one_batch_are_merged(pending_buffer):
    added = pending_buffer.append(_items(("https://a.com/1", "One"), ("https://a.com/1", "Two")))
    assert added == [SharedItem(url="https://a.com/1", title="One")]


def test_appending_nothing_changes_nothing(memory_store, pending_buffer):
    items = _items(("https://a.com/1", "A"))
    pending_buffer.append(items)
    before = memory_store.get(SLOT)

    assert pending_buffer.append([]) == []
    assert memory_store.get(SLOT) == before
    assert pending_buffer.peek() == items


def test_empty_append_does_not_create_slot(memory_store, pending_buffer):
    pending_buffer.append([])
    assert memory_store.get(SLOT) is None


def test_drain_returns_contents_then_empties(pending_buffer):
    items = _items(("https://a.com/1", "A"), ("https://b.com/2", ""))
    pending_buffer.append(items)

    assert pending_buffer.drain() == items
    assert pending_buffer.drain() == []


def test_consume_json_layout(pending_buffer):
    pending_buffer.append(_items(("https://a.com/1", "제목")))

    payload = pending_buffer.consume_json()

    assert json.loads(payload) == [{"url": "https://a.com/1", "title": "제목"}]
    assert pending_buffer.consume_json() == "[]"


@pytest.mark.parametrize("raw", ["not json", "{\"url\": \"x\"}", "42", "", "null"])
def test_unreadable_slot_is_treated_as_empty(raw):
    buffer = PendingBuffer(InMemoryKeyValueStore({SLOT: raw}), slot_key=SLOT)

    assert buffer.peek() == []
    assert buffer.consume_json() == "[]"


def test_unreadable_slot_is_replaced_on_append():
    store = InMemoryKeyValueStore({SLOT: "garbage"})
    buffer = PendingBuffer(store, slot_key=SLOT)

    buffer.append(_items(("https://a.com/1", "")))

    assert json.loads(store.get(SLOT)) == [{"url": "https://a.com/1", "title": ""}]


def test_malformed_entries_are_skipped():
    raw = json.dumps(
        [
            {"url": "https://a.com/1", "title": "A"},
            "https://loose-string.com",
            {"title": "no url"},
            {"url": ""},
            {"url": "https://b.com/2", "title": None},
        ]
    )
    buffer = PendingBuffer(InMemoryKeyValueStore({SLOT: raw}), slot_key=SLOT)

    assert buffer.peek() == _items(("https://a.com/1", "A"), ("https://b.com/2", ""))


def test_store_read_failure_degrades_to_empty():
    class BrokenStore:
        def get(self, key):
            raise OSError("disk gone")

        def set(self, key, value):
            raise OSError("disk gone")

    buffer = PendingBuffer(BrokenStore(), slot_key=SLOT)

    assert buffer.peek() == []
    assert buffer.consume_json() == "[]"


def test_buffer_state_survives_new_instance(memory_store):
    PendingBuffer(memory_store, slot_key=SLOT).append(_items(("https://a.com/1", "A")))

    reopened = PendingBuffer(memory_store, slot_key=SLOT)

    assert reopened.drain() == _items(("https://a.com/1", "A"))


def test_sql_store_backs_the_buffer(sql_store):
    buffer = PendingBuffer(sql_store, slot_key=SLOT)
    buffer.append(_items(("https://a.com/1", "A")))
    buffer.append(_items(("https://a.com/1", "dup"), ("https://b.com/2", "B")))

    assert PendingBuffer(sql_store, slot_key=SLOT).drain() == _items(
        ("https://a.com/1", "A"), ("https://b.com/2", "B")
    )
    assert buffer.drain() == []


def test_store_failure_is_logged_with_component(caplog):
    class BrokenStore:
        def get(self, key):
            raise OSError("disk gone")

    with caplog.at_level(logging.WARNING, logger="url_inbox.services.pending_buffer"):
        PendingBuffer(BrokenStore(), slot_key=SLOT).peek()

    record = caplog.records[-1]
    assert record.component == "pending_buffer"
    assert record.operation == "load"


def test_concurrent_appends_and_drains_lose_nothing(memory_store):
    buffer = PendingBuffer(memory_store, slot_key=SLOT)
    writers = 4
    per_writer = 50
    drained = []
    done = threading.Event()

    def write(worker):
        for n in range(per_writer):
            buffer.append(_items((f"https://w{worker}.com/{n}", "")))

    def drain():
        while not done.is_set():
            drained.extend(buffer.drain())

    drainer = threading.Thread(target=drain)
    threads = [threading.Thread(target=write, args=(worker,)) for worker in range(writers)]
    drainer.start()
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    done.set()
    drainer.join()
    drained.extend(buffer.drain())

    urls = [item.url for item in drained]
    assert len(urls) == len(set(urls))
    assert set(urls) == {
        f"https://w{worker}.com/{n}" for worker in range(writers) for n in range(per_writer)
    }
