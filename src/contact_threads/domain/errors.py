"""Domain errors."""


class InvalidAddress(ValueError):
    """Raised when an address carries neither a service id nor a phone number."""
