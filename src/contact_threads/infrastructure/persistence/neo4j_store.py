"""Neo4j implementation of ThreadStore.
Graph: one (:ContactThread) node per contact thread. service_id and phone_number are
each unique; a missing identifier is stored as an absent property so the
constraints ignore it. Legacy properties not modelled here are carried in
ContactThread.obsolete_attributes.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from neo4j import READ_ACCESS, WRITE_ACCESS
from neo4j.exceptions import ConstraintError

from contact_threads.application.ports import TransactionAborted, UniqueConstraintViolation
from contact_threads.domain import (
    ContactThread,
    MentionNotificationMode,
    NewContactThread,
    StoryViewMode,
)

logger = logging.getLogger(__name__)

_CONSTRAINT_QUERIES = (
    """
    CREATE CONSTRAINT contact_thread_id_unique IF NOT EXISTS
    FOR (t:ContactThread) REQUIRE t.id IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_thread_service_id_unique IF NOT EXISTS
    FOR (t:ContactThread) REQUIRE t.service_id IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_thread_phone_number_unique IF NOT EXISTS
    FOR (t:ContactThread) REQUIRE t.phone_number IS UNIQUE
    """,
)

_FIND_BY_SERVICE_ID_QUERY = """
MATCH (t:ContactThread { service_id: $service_id })
RETURN t
LIMIT 1
"""

_FIND_BY_PHONE_NUMBER_QUERY = """
MATCH (t:ContactThread { phone_number: $phone_number })
RETURN t
LIMIT 1
"""

_FIND_BY_ID_QUERY = """
MATCH (t:ContactThread { id: $id })
RETURN t
"""

_LIST_ALL_QUERY = """
MATCH (t:ContactThread)
RETURN t
ORDER BY t.created_at
"""

_MERGE_BY_SERVICE_ID_QUERY = """
MERGE (t:ContactThread { service_id: $service_id })
ON CREATE SET t.id = $id,
    t.phone_number = $phone_number,
    t.created_at = $created_at,
    t.last_interaction_row_id = 0,
    t.mention_notification_mode = 0,
    t.should_thread_be_visible = false,
    t.story_view_mode = 0,
    t.has_dismissed_offers = false
RETURN t, t.id = $id AS created
"""

_MERGE_BY_PHONE_NUMBER_QUERY = """
MERGE (t:ContactThread { phone_number: $phone_number })
ON CREATE SET t.id = $id,
    t.created_at = $created_at,
    t.last_interaction_row_id = 0,
    t.mention_notification_mode = 0,
    t.should_thread_be_visible = false,
    t.story_view_mode = 0,
    t.has_dismissed_offers = false
RETURN t, t.id = $id AS created
"""

_KNOWN_PROPERTIES = frozenset(
    {
        "id",
        "service_id",
        "phone_number",
        "created_at",
        "last_interaction_row_id",
        "message_draft",
        "mention_notification_mode",
        "should_thread_be_visible",
        "story_view_mode",
        "has_dismissed_offers",
        "edit_target_timestamp",
        "last_sent_story_timestamp",
    }
)


def _datetime_to_iso(dt: datetime) -> str:
    return dt.isoformat()


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


class _Neo4jReadTransaction:
    def __init__(self, tx) -> None:
        self._tx = tx
        self._aborted = False

    def _single_thread(self, query: str, **params) -> ContactThread | None:
        if self._aborted:
            raise TransactionAborted("Neo4j transaction failed on a constraint error.")
        record = self._tx.run(query, **params).single()
        if not record:
            return None
        return _node_to_thread(record["t"])

    def find_by_service_id(self, service_id: str) -> ContactThread | None:
        return self._single_thread(_FIND_BY_SERVICE_ID_QUERY, service_id=service_id)

    def find_by_phone_number(self, phone_number: str) -> ContactThread | None:
        return self._single_thread(_FIND_BY_PHONE_NUMBER_QUERY, phone_number=phone_number)

    def find_by_id(self, thread_id: str) -> ContactThread | None:
        return self._single_thread(_FIND_BY_ID_QUERY, id=thread_id)


class _Neo4jWriteTransaction(_Neo4jReadTransaction):
    def insert(self, new_thread: NewContactThread) -> ContactThread:
        thread_id = str(uuid.uuid4())
        created_at = _datetime_to_iso(datetime.now(timezone.utc))
        if new_thread.service_id:
            key, value = "service_id", new_thread.service_id
            query = _MERGE_BY_SERVICE_ID_QUERY
        else:
            key, value = "phone_number", new_thread.phone_number
            query = _MERGE_BY_PHONE_NUMBER_QUERY
        try:
            record = self._tx.run(
                query,
                id=thread_id,
                service_id=new_thread.service_id,
                phone_number=new_thread.phone_number,
                created_at=created_at,
            ).single()
        except ConstraintError as exc:
            # Secondary key (phone) taken; Neo4j has failed this transaction.
            self._aborted = True
            raise UniqueConstraintViolation("phone_number", new_thread.phone_number) from exc
        if not record:
            raise RuntimeError("insert: expected one result")
        if not record["created"]:
            raise UniqueConstraintViolation(key, value)
        return _node_to_thread(record["t"])


class Neo4jThreadStore:
    """Stores contact threads in Neo4j.
    Call ensure_constraints at startup so both identifiers are unique.
    """

    def __init__(self, driver: object, database: str | None = None) -> None:
        self._driver = driver
        self._database = database

    def ensure_constraints(self) -> None:
        """Create unique constraints on id, service_id and phone_number if missing."""
        with self._driver.session(database=self._database) as session:
            for query in _CONSTRAINT_QUERIES:
                session.run(query).consume()
        logger.info("Contact thread constraints ensured")

    @contextmanager
    def read(self):
        with self._driver.session(
            database=self._database, default_access_mode=READ_ACCESS
        ) as session:
            with session.begin_transaction() as tx:
                yield _Neo4jReadTransaction(tx)
                tx.commit()

    @contextmanager
    def write(self):
        with self._driver.session(
            database=self._database, default_access_mode=WRITE_ACCESS
        ) as session:
            with session.begin_transaction() as tx:
                yield _Neo4jWriteTransaction(tx)
                tx.commit()

    def snapshot_thread(self, thread_id: str) -> ContactThread | None:
        with self._driver.session(
            database=self._database, default_access_mode=READ_ACCESS
        ) as session:
            record = session.run(_FIND_BY_ID_QUERY, id=thread_id).single()
        if not record:
            return None
        return _node_to_thread(record["t"])

    def list_all(self) -> list[ContactThread]:
        with self._driver.session(
            database=self._database, default_access_mode=READ_ACCESS
        ) as session:
            result = session.run(_LIST_ALL_QUERY)
            return [_node_to_thread(rec["t"]) for rec in result]


def _node_to_thread(node) -> ContactThread:
    props = dict(node)
    obsolete = {k: v for k, v in props.items() if k not in _KNOWN_PROPERTIES}
    return ContactThread(
        id=props["id"],
        service_id=props.get("service_id") or None,
        phone_number=props.get("phone_number") or None,
        created_at=_iso_to_datetime(props["created_at"]),
        last_interaction_row_id=props.get("last_interaction_row_id") or 0,
        message_draft=props.get("message_draft"),
        mention_notification_mode=MentionNotificationMode(
            props.get("mention_notification_mode") or 0
        ),
        should_thread_be_visible=bool(props.get("should_thread_be_visible")),
        story_view_mode=StoryViewMode(props.get("story_view_mode") or 0),
        has_dismissed_offers=bool(props.get("has_dismissed_offers")),
        edit_target_timestamp=props.get("edit_target_timestamp"),
        last_sent_story_timestamp=props.get("last_sent_story_timestamp"),
        obsolete_attributes=obsolete,
    )
