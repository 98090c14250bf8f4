"""In-memory implementation of ThreadStore (no DB)."""

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone

from contact_threads.application.ports import UniqueConstraintViolation
from contact_threads.domain import ContactThread, NewContactThread


@dataclass
class _State:
    by_id: dict[str, ContactThread] = field(default_factory=dict)
    id_by_service_id: dict[str, str] = field(default_factory=dict)
    id_by_phone: dict[str, str] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)

    def copy(self) -> "_State":
        return _State(
            by_id=dict(self.by_id),
            id_by_service_id=dict(self.id_by_service_id),
            id_by_phone=dict(self.id_by_phone),
            order=list(self.order),
        )


class _InMemoryReadTransaction:
    def __init__(self, state: _State) -> None:
        self._state = state

    def find_by_service_id(self, service_id: str) -> ContactThread | None:
        thread_id = self._state.id_by_service_id.get(service_id)
        return self._state.by_id.get(thread_id) if thread_id else None

    def find_by_phone_number(self, phone_number: str) -> ContactThread | None:
        thread_id = self._state.id_by_phone.get(phone_number)
        return self._state.by_id.get(thread_id) if thread_id else None

    def find_by_id(self, thread_id: str) -> ContactThread | None:
        return self._state.by_id.get(thread_id)


class _InMemoryWriteTransaction(_InMemoryReadTransaction):
    def insert(self, new_thread: NewContactThread) -> ContactThread:
        state = self._state
        if new_thread.service_id and new_thread.service_id in state.id_by_service_id:
            raise UniqueConstraintViolation("service_id", new_thread.service_id)
        if new_thread.phone_number and new_thread.phone_number in state.id_by_phone:
            raise UniqueConstraintViolation("phone_number", new_thread.phone_number)
        thread = ContactThread(
            id=str(uuid.uuid4()),
            service_id=new_thread.service_id,
            phone_number=new_thread.phone_number,
            created_at=datetime.now(timezone.utc),
        )
        state.by_id[thread.id] = thread
        if thread.service_id:
            state.id_by_service_id[thread.service_id] = thread.id
        if thread.phone_number:
            state.id_by_phone[thread.phone_number] = thread.id
        state.order.append(thread.id)
        return thread


class InMemoryThreadStore:
    """Stores contact threads in memory.

    Writers are serialized and stage their changes on a private copy that is
    published on commit. Readers see the last committed state. A write scope
    opened while the same thread already holds one joins the outer scope.
    """

    def __init__(self) -> None:
        self._committed = _State()
        self._write_lock = threading.Lock()
        self._local = threading.local()

    @contextmanager
    def read(self):
        active = getattr(self._local, "write_tx", None)
        if active is not None:
            yield active
            return
        yield _InMemoryReadTransaction(self._committed)

    @contextmanager
    def write(self):
        active = getattr(self._local, "write_tx", None)
        if active is not None:
            yield active
            return
        with self._write_lock:
            staged = self._committed.copy()
            tx = _InMemoryWriteTransaction(staged)
            self._local.write_tx = tx
            try:
                yield tx
            finally:
                self._local.write_tx = None
            self._committed = staged

    def snapshot_thread(self, thread_id: str) -> ContactThread | None:
        return self._committed.by_id.get(thread_id)

    def list_all(self) -> list[ContactThread]:
        """Return committed threads in creation order."""
        state = self._committed
        return [state.by_id[tid] for tid in state.order]
