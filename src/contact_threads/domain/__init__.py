"""Domain layer: entities and value objects. No dependencies on outer layers."""

from contact_threads.domain.entities import (
    Address,
    ContactThread,
    MentionNotificationMode,
    NewContactThread,
    StoryViewMode,
)
from contact_threads.domain.errors import InvalidAddress

__all__ = [
    "Address",
    "ContactThread",
    "InvalidAddress",
    "MentionNotificationMode",
    "NewContactThread",
    "StoryViewMode",
]
