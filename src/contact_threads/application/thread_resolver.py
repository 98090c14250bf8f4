"""Contact thread resolution: get-or-create and get-only lookups by address."""

import logging
from dataclasses import replace

from contact_threads.application.ports import (
    ThreadReadTransaction,
    ThreadStore,
    ThreadWriteTransaction,
    TransactionAborted,
    UniqueConstraintViolation,
)
from contact_threads.domain import Address, ContactThread, NewContactThread

logger = logging.getLogger(__name__)


def _mask_phone(phone_number: str | None) -> str:
    if not phone_number:
        return "-"
    return "*" * max(len(phone_number) - 4, 0) + phone_number[-4:]


def _find_thread(tx: ThreadReadTransaction, address: Address) -> ContactThread | None:
    """Service id first; phone number for phone-only addresses.

    When the service id misses, a phone match is only accepted from a legacy
    thread that has no service id of its own.
    """
    if address.service_id:
        thread = tx.find_by_service_id(address.service_id)
        if thread is not None:
            return thread
        if not address.phone_number:
            return None
        thread = tx.find_by_phone_number(address.phone_number)
        if thread is not None and thread.service_id is None:
            return thread
        return None
    return tx.find_by_phone_number(address.phone_number)


class ContactThreadResolver:
    """Finds or creates the single contact thread for an address.

    Every operation takes an optional transaction. Without one, the resolver
    opens its own scope on the store.
    """

    def __init__(self, store: ThreadStore) -> None:
        self._store = store

    def get_or_create_thread(
        self,
        address: Address,
        transaction: ThreadWriteTransaction | None = None,
    ) -> ContactThread:
        """Return the thread for address, creating it on a miss.

        An existing thread is returned as stored, even if its phone number
        differs from the one supplied. A concurrent writer that created the
        thread first is resolved by one re-lookup.
        """
        if transaction is not None:
            try:
                return self._get_or_create(transaction, address)
            except UniqueConstraintViolation as exc:
                try:
                    return self._recover_from_race(transaction, address, exc)
                except TransactionAborted:
                    # The violation killed the caller's transaction; look up committed state instead.
                    with self._store.read() as tx:
                        return self._recover_from_race(tx, address, exc)
        try:
            with self._store.write() as tx:
                return self._get_or_create(tx, address)
        except UniqueConstraintViolation as exc:
            with self._store.read() as tx:
                return self._recover_from_race(tx, address, exc)

    def get_thread(
        self,
        address: Address,
        transaction: ThreadReadTransaction | None = None,
    ) -> ContactThread | None:
        """Return the existing thread for address, or None. Never creates."""
        if transaction is not None:
            return _find_thread(transaction, address)
        with self._store.read() as tx:
            return _find_thread(tx, address)

    def address_from_thread_id(
        self,
        thread_id: str,
        transaction: ThreadReadTransaction | None = None,
    ) -> Address | None:
        """Return the stored address of a thread, or None if no such thread."""
        if transaction is not None:
            thread = transaction.find_by_id(thread_id)
        else:
            with self._store.read() as tx:
                thread = tx.find_by_id(thread_id)
        if thread is None:
            return None
        return thread.contact_address

    def legacy_phone_number(self, thread_id: str) -> str | None:
        """Return the stored phone number of a thread, or None.

        Only for migrating records written before service ids existed.
        """
        thread = self._store.snapshot_thread(thread_id)
        if thread is None:
            return None
        return thread.phone_number

    def _get_or_create(
        self, tx: ThreadWriteTransaction, address: Address
    ) -> ContactThread:
        thread = _find_thread(tx, address)
        if thread is not None:
            return thread

        new_thread = NewContactThread.for_address(address)
        if new_thread.service_id and new_thread.phone_number:
            if tx.find_by_phone_number(new_thread.phone_number) is not None:
                # Phone is held by another contact's thread until reconciliation moves it.
                new_thread = replace(new_thread, phone_number=None)
        thread = tx.insert(new_thread)
        logger.info(
            "Created contact thread %s (service_id=%s, phone=%s)",
            thread.id,
            thread.service_id or "-",
            _mask_phone(thread.phone_number),
        )
        return thread

    def _recover_from_race(
        self,
        tx: ThreadReadTransaction,
        address: Address,
        exc: UniqueConstraintViolation,
    ) -> ContactThread:
        thread = _find_thread(tx, address)
        if thread is None:
            raise exc
        logger.warning(
            "Contact thread for %s was created concurrently; using %s",
            exc.field,
            thread.id,
        )
        return thread
