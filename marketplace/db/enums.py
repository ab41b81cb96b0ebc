"""Enum definitions for application constants."""

from enum import Enum


class ListingType(str, Enum):
    """
    The six listing domains.

    - SERVICE / WORK: published by a performer offering work; clients respond
    - AD / RENT / RENT_AD / WORK_AD: published by a client; performers respond
    """
    SERVICE = "service"
    AD = "ad"
    RENT = "rent"
    RENT_AD = "rent_ad"
    WORK = "work"
    WORK_AD = "work_ad"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid listing type."""
        return value in cls._value2member_map_


class ListingStatus(str, Enum):
    """Lifecycle status stored on every listing row."""
    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ARCHIVED = "archived"


class ConfirmationStatus(str, Enum):
    """
    Status of a confirmation between a client and a performer.

    Workflow: active → in_progress → done
    Cancel moves active/in_progress to archived.
    """
    ACTIVE = "active"  # Candidate conversation, not yet confirmed
    IN_PROGRESS = "in_progress"  # Performer locked in
    DONE = "done"  # Engagement completed
    ARCHIVED = "archived"  # Cancelled


class ListingParty(str, Enum):
    """Which side of an engagement a user is on."""
    CLIENT = "client"
    PERFORMER = "performer"


DEFAULT_LISTING_STATUS = ListingStatus.ACTIVE.value
DEFAULT_CONFIRMATION_STATUS = ConfirmationStatus.ACTIVE.value
