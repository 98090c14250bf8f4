"""
Contact threads core: clean-architecture layout.

- domain: entities (Address, ContactThread). No outer dependencies.
- application: use cases (ContactThreadResolver), ports (ThreadStore and its transactions).
- infrastructure: adapters (InMemoryThreadStore, Neo4jThreadStore), phone normalization, config.
"""

from contact_threads.application import (
    ContactThreadResolver,
    ThreadReadTransaction,
    ThreadStore,
    ThreadWriteTransaction,
    TransactionAborted,
    UniqueConstraintViolation,
)
from contact_threads.domain import (
    Address,
    ContactThread,
    InvalidAddress,
    MentionNotificationMode,
    NewContactThread,
    StoryViewMode,
)
from contact_threads.infrastructure import (
    InMemoryThreadStore,
    Neo4jThreadStore,
    make_address,
)

__all__ = [
    "Address",
    "ContactThread",
    "ContactThreadResolver",
    "InMemoryThreadStore",
    "InvalidAddress",
    "MentionNotificationMode",
    "Neo4jThreadStore",
    "NewContactThread",
    "StoryViewMode",
    "ThreadReadTransaction",
    "ThreadStore",
    "ThreadWriteTransaction",
    "TransactionAborted",
    "UniqueConstraintViolation",
    "make_address",
]
