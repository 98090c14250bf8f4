"""Application layer: use cases and ports. Depends only on domain."""

from contact_threads.application.ports import (
    ThreadReadTransaction,
    ThreadStore,
    ThreadWriteTransaction,
    TransactionAborted,
    UniqueConstraintViolation,
)
from contact_threads.application.thread_resolver import ContactThreadResolver

__all__ = [
    "ContactThreadResolver",
    "ThreadReadTransaction",
    "ThreadStore",
    "ThreadWriteTransaction",
    "TransactionAborted",
    "UniqueConstraintViolation",
]
