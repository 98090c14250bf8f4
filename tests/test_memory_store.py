"""Unit tests for InMemoryThreadStore transactions and unique keys."""

import uuid

import pytest

from contact_threads.application import UniqueConstraintViolation
from contact_threads.domain import NewContactThread
from contact_threads.infrastructure import InMemoryThreadStore


def test_insert_assigns_id_and_defaults() -> None:
    store = InMemoryThreadStore()
    with store.write() as tx:
        thread = tx.insert(NewContactThread(service_id="S-1", phone_number="+12025551111"))
    uuid.UUID(thread.id)
    assert thread.created_at.tzinfo is not None
    assert store.snapshot_thread(thread.id) == thread
    assert store.list_all() == [thread]


def test_insert_rejects_taken_service_id() -> None:
    store = InMemoryThreadStore()
    with store.write() as tx:
        tx.insert(NewContactThread(service_id="S-1"))
    with store.write() as tx:
        with pytest.raises(UniqueConstraintViolation) as excinfo:
            tx.insert(NewContactThread(service_id="S-1", phone_number="+12025551111"))
    assert excinfo.value.field == "service_id"
    assert len(store.list_all()) == 1


def test_insert_rejects_taken_phone_number_in_same_transaction() -> None:
    store = InMemoryThreadStore()
    with store.write() as tx:
        tx.insert(NewContactThread(phone_number="+12025551111"))
        with pytest.raises(UniqueConstraintViolation) as excinfo:
            tx.insert(NewContactThread(service_id="S-2", phone_number="+12025551111"))
    assert excinfo.value.field == "phone_number"
    assert excinfo.value.value == "+12025551111"


def test_open_read_does_not_see_later_commits() -> None:
    store = InMemoryThreadStore()
    with store.read() as before:
        with store.write() as tx:
            thread = tx.insert(NewContactThread(service_id="S-1"))
        assert before.find_by_service_id("S-1") is None
    with store.read() as after:
        assert after.find_by_service_id("S-1") == thread
        assert after.find_by_id(thread.id) == thread


def test_nested_write_joins_outer_transaction() -> None:
    store = InMemoryThreadStore()
    with store.write() as outer:
        with store.write() as inner:
            assert inner is outer
            inner.insert(NewContactThread(phone_number="+12025551111"))
        assert store.list_all() == []
        with store.read() as read_tx:
            assert read_tx.find_by_phone_number("+12025551111") is not None
    assert len(store.list_all()) == 1


def test_rollback_discards_staged_inserts() -> None:
    store = InMemoryThreadStore()
    with pytest.raises(KeyError):
        with store.write() as tx:
            tx.insert(NewContactThread(service_id="S-1"))
            raise KeyError("abort")
    with store.read() as tx:
        assert tx.find_by_service_id("S-1") is None
    with store.write() as tx:
        tx.insert(NewContactThread(service_id="S-1"))
    assert len(store.list_all()) == 1
