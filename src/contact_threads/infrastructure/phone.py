"""Phone number normalization to the E.164 form used as a thread lookup key."""

import phonenumbers


def normalize_phone(raw: str | None, default_region: str | None = None) -> str | None:
    """Return the E.164 lookup key for a phone number, or None if it cannot be one.

    Keys only need to be well formed, so any number whose length fits its
    country is accepted (unassigned ranges such as +1 555 included). Numbers
    without a leading + are read in default_region (e.g. "us" or "US"); with
    no region they cannot be keyed.
    """
    raw = (raw or "").strip()
    if not raw:
        return None
    region = (default_region or "").strip().upper() or None
    try:
        parsed = phonenumbers.parse(raw, region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_possible_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
