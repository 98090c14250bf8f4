"""Domain entities: Address, ContactThread, and NewContactThread."""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone

from contact_threads.domain.errors import InvalidAddress


class MentionNotificationMode(enum.IntEnum):
    DEFAULT = 0
    ALWAYS = 1
    NEVER = 2


class StoryViewMode(enum.IntEnum):
    DEFAULT = 0
    EXPLICIT = 1
    DISABLED = 2


@dataclass(frozen=True)
class Address:
    """
    Identifies a contact by service id, phone number, or both.
    Service ids are stored uppercase so lookups are case-insensitive.
    Phone numbers are opaque here; normalize them before building an Address.
    """

    service_id: str | None = None
    phone_number: str | None = None

    def __post_init__(self):
        service_id = (self.service_id or "").strip().upper() or None
        phone_number = (self.phone_number or "").strip() or None
        if service_id is None and phone_number is None:
            raise InvalidAddress(
                "Address must have a service id or a phone number."
            )
        object.__setattr__(self, "service_id", service_id)
        object.__setattr__(self, "phone_number", phone_number)

    def matches(self, other: "Address") -> bool:
        """True if both addresses identify the same contact.

        Service ids win when both sides have one; otherwise phone numbers decide.
        """
        if self.service_id and other.service_id:
            return self.service_id == other.service_id
        return bool(
            self.phone_number
            and other.phone_number
            and self.phone_number == other.phone_number
        )


@dataclass(frozen=True)
class NewContactThread:
    """Identifying fields for a thread that does not exist yet.
    The store fills in the id and conversation-state defaults on insert.
    """

    service_id: str | None = None
    phone_number: str | None = None

    def __post_init__(self):
        if not self.service_id and not self.phone_number:
            raise InvalidAddress(
                "A new contact thread needs a service id or a phone number."
            )

    @classmethod
    def for_address(cls, address: Address) -> "NewContactThread":
        return cls(service_id=address.service_id, phone_number=address.phone_number)


@dataclass(frozen=True)
class ContactThread:
    """
    The persisted one-to-one conversation with a single contact.
    No two threads share a service id, and no two share a phone number.
    """

    id: str
    service_id: str | None = None
    phone_number: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_interaction_row_id: int = 0
    message_draft: str | None = None
    mention_notification_mode: MentionNotificationMode = MentionNotificationMode.DEFAULT
    should_thread_be_visible: bool = False
    story_view_mode: StoryViewMode = StoryViewMode.DEFAULT
    # Deprecated; kept for records written by older clients.
    has_dismissed_offers: bool = False
    edit_target_timestamp: int | None = None
    last_sent_story_timestamp: int | None = None
    # Legacy schema columns (color, archived, muted, ...). Carried, never read.
    obsolete_attributes: dict = field(default_factory=dict)

    @property
    def contact_address(self) -> Address:
        return Address(service_id=self.service_id, phone_number=self.phone_number)
