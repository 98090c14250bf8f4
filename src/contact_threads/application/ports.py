"""Application ports (interfaces). Implemented by infrastructure adapters."""

from contextlib import AbstractContextManager
from typing import Protocol

from contact_threads.domain import ContactThread, NewContactThread


class UniqueConstraintViolation(Exception):
    """Insert refused because another thread already holds an identifying value."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"A contact thread with {field}={value!r} already exists.")
        self.field = field
        self.value = value


class TransactionAborted(Exception):
    """The transaction failed earlier and can no longer run lookups."""


class ThreadReadTransaction(Protocol):
    """Point lookups against the thread identity index. Each returns at most one thread."""

    def find_by_service_id(self, service_id: str) -> ContactThread | None:
        ...

    def find_by_phone_number(self, phone_number: str) -> ContactThread | None:
        ...

    def find_by_id(self, thread_id: str) -> ContactThread | None:
        ...


class ThreadWriteTransaction(ThreadReadTransaction, Protocol):
    def insert(self, new_thread: NewContactThread) -> ContactThread:
        """Persist a new thread with store defaults and return it.

        Raises UniqueConstraintViolation if its service id or phone number is taken.
        """
        ...


class ThreadStore(Protocol):
    """Opens read and write scopes. A write scope commits on normal exit and rolls back on error."""

    def read(self) -> AbstractContextManager[ThreadReadTransaction]:
        ...

    def write(self) -> AbstractContextManager[ThreadWriteTransaction]:
        ...

    def snapshot_thread(self, thread_id: str) -> ContactThread | None:
        """Return the committed thread with this id without an explicit transaction."""
        ...
