"""Tests for Neo4jThreadStore. Integration tests require Docker (testcontainers)."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from contact_threads.application import (
    ContactThreadResolver,
    TransactionAborted,
    UniqueConstraintViolation,
)
from contact_threads.domain import (
    Address,
    MentionNotificationMode,
    NewContactThread,
    StoryViewMode,
)
from contact_threads.infrastructure import Neo4jThreadStore
from contact_threads.infrastructure.persistence.neo4j_store import _node_to_thread


def test_node_to_thread_keeps_unknown_properties_as_obsolete() -> None:
    thread = _node_to_thread(
        {
            "id": "t1",
            "phone_number": "+12025551111",
            "service_id": "",
            "created_at": "2024-01-02T03:04:05Z",
            "mention_notification_mode": 2,
            "story_view_mode": 1,
            "should_thread_be_visible": True,
            "conversation_color_name_obsolete": "crimson",
            "is_archived_obsolete": False,
        }
    )
    assert thread.id == "t1"
    assert thread.service_id is None
    assert thread.phone_number == "+12025551111"
    assert thread.created_at.year == 2024
    assert thread.created_at.tzinfo is not None
    assert thread.mention_notification_mode is MentionNotificationMode.NEVER
    assert thread.story_view_mode is StoryViewMode.EXPLICIT
    assert thread.should_thread_be_visible is True
    assert thread.last_interaction_row_id == 0
    assert thread.obsolete_attributes == {
        "conversation_color_name_obsolete": "crimson",
        "is_archived_obsolete": False,
    }


@pytest.fixture(scope="session")
def neo4j_driver():
    testcontainers_neo4j = pytest.importorskip("testcontainers.neo4j")
    container = testcontainers_neo4j.Neo4jContainer()
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"Neo4j container unavailable: {exc}")
    driver = container.get_driver()
    try:
        yield driver
    finally:
        driver.close()
        container.stop()


@pytest.fixture
def store(neo4j_driver):
    """Clear the graph before each test so tests are independent."""
    with neo4j_driver.session() as session:
        session.run("MATCH (n) DETACH DELETE n")
    store = Neo4jThreadStore(neo4j_driver)
    store.ensure_constraints()
    return store


def test_ensure_constraints_is_idempotent(store):
    store.ensure_constraints()
    store.ensure_constraints()


def test_insert_and_lookup_by_each_key(store):
    with store.write() as tx:
        thread = tx.insert(NewContactThread(service_id="S-1", phone_number="+12025551111"))
    with store.read() as tx:
        assert tx.find_by_service_id("S-1") == thread
        assert tx.find_by_phone_number("+12025551111") == thread
        assert tx.find_by_id(thread.id) == thread
        assert tx.find_by_service_id("S-2") is None
    assert store.snapshot_thread(thread.id) == thread
    assert store.list_all() == [thread]


def test_insert_phone_only_thread_stores_no_service_id(store):
    with store.write() as tx:
        thread = tx.insert(NewContactThread(phone_number="+12025551111"))
    assert thread.service_id is None
    assert thread.mention_notification_mode is MentionNotificationMode.DEFAULT
    with store.write() as tx:
        other = tx.insert(NewContactThread(phone_number="+12025552222"))
    assert other.id != thread.id


def test_insert_existing_service_id_signals_violation(store):
    with store.write() as tx:
        tx.insert(NewContactThread(service_id="S-1"))
    with store.write() as tx:
        with pytest.raises(UniqueConstraintViolation) as excinfo:
            tx.insert(NewContactThread(service_id="S-1"))
        assert excinfo.value.field == "service_id"
        # MERGE did not fail the transaction, so it can still be read.
        assert tx.find_by_service_id("S-1") is not None
    assert len(store.list_all()) == 1


def test_failed_write_rolls_back(store):
    with pytest.raises(RuntimeError):
        with store.write() as tx:
            tx.insert(NewContactThread(service_id="S-1"))
            raise RuntimeError("abort")
    assert store.list_all() == []


def test_resolver_scenario(store):
    resolver = ContactThreadResolver(store)
    r1 = resolver.get_or_create_thread(Address(service_id="ABC-123"))
    assert resolver.get_or_create_thread(Address(service_id="abc-123")).id == r1.id
    assert resolver.get_thread(Address(phone_number="+15551234567")) is None
    assert resolver.address_from_thread_id(r1.id) == Address(service_id="ABC-123")
    assert resolver.legacy_phone_number(r1.id) is None
    assert len(store.list_all()) == 1


def test_dual_key_lookup(store):
    resolver = ContactThreadResolver(store)
    created = resolver.get_or_create_thread(
        Address(service_id="S-1", phone_number="+12025551111")
    )
    assert resolver.get_or_create_thread(Address(service_id="S-1")).id == created.id
    assert resolver.get_or_create_thread(Address(phone_number="+12025551111")).id == created.id
    assert resolver.legacy_phone_number(created.id) == "+12025551111"


def test_concurrent_get_or_create_by_phone_creates_one_thread(store):
    resolver = ContactThreadResolver(store)
    address = Address(phone_number="+15550000000")
    with ThreadPoolExecutor(max_workers=4) as pool:
        threads = list(pool.map(lambda _: resolver.get_or_create_thread(address), range(8)))
    assert len({t.id for t in threads}) == 1
    assert len(store.list_all()) == 1


def test_concurrent_get_or_create_by_service_id_creates_one_thread(store):
    resolver = ContactThreadResolver(store)
    spellings = ["abc-1", "ABC-1", "Abc-1", "aBC-1"]
    with ThreadPoolExecutor(max_workers=4) as pool:
        threads = list(
            pool.map(
                lambda i: resolver.get_or_create_thread(
                    Address(service_id=spellings[i % len(spellings)])
                ),
                range(8),
            )
        )
    assert len({t.id for t in threads}) == 1
    assert threads[0].service_id == "ABC-1"
    assert len(store.list_all()) == 1


def test_phone_conflict_aborts_transaction(store):
    with store.write() as tx:
        legacy = tx.insert(NewContactThread(phone_number="+12025551111"))
    with pytest.raises(UniqueConstraintViolation):
        with store.write() as tx:
            with pytest.raises(UniqueConstraintViolation) as excinfo:
                tx.insert(NewContactThread(service_id="S-2", phone_number="+12025551111"))
            assert excinfo.value.field == "phone_number"
            with pytest.raises(TransactionAborted):
                tx.find_by_phone_number("+12025551111")
            raise excinfo.value
    assert store.list_all() == [legacy]
