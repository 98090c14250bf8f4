"""Build normalized addresses from raw contact data."""

from contact_threads.domain import Address
from contact_threads.infrastructure.phone import normalize_phone


def make_address(
    service_id: str | None = None,
    phone_number: str | None = None,
    *,
    default_region: str | None = None,
) -> Address:
    """Return an Address with an uppercase service id and an E.164 phone number.

    A phone number that does not parse is dropped. Raises InvalidAddress when
    nothing identifying is left.
    """
    phone = normalize_phone(phone_number, default_region=default_region)
    return Address(service_id=service_id, phone_number=phone)
