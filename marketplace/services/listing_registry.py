"""Listing type registry - maps each listing type to the table that stores it."""

from dataclasses import dataclass

from marketplace.db.enums import ListingParty, ListingStatus, ListingType
from marketplace.db.models import (
    AdListing,
    ListingMixin,
    RentAdListing,
    RentListing,
    ServiceListing,
    WorkAdListing,
    WorkListing,
)


class InvalidListingTypeError(ValueError):
    """Listing type is not one of the known listing domains."""

    pass


@dataclass(frozen=True)
class ListingTypeDescriptor:
    """
    Storage layout and engagement rules for one listing type.

    owner_role: which party of a confirmation the listing owner plays. The
        respondent is always the other party.
    status_on_confirm: listing status written when a performer is locked in
        (None leaves the listing status untouched).
    """

    listing_type: ListingType
    model: type[ListingMixin]
    owner_role: ListingParty
    status_on_confirm: ListingStatus | None
    status_on_complete: ListingStatus = ListingStatus.DONE
    status_on_cancel: ListingStatus = ListingStatus.ACTIVE
    id_column: str = "id"
    owner_column: str = "user_id"
    status_column: str = "status"
    promotion_column: str = "top"

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @property
    def responder_role(self) -> ListingParty:
        if self.owner_role == ListingParty.PERFORMER:
            return ListingParty.CLIENT
        return ListingParty.PERFORMER

    def column(self, name: str):
        return getattr(self.model, name)


@dataclass(frozen=True)
class ListingRef:
    """Identifies a listing independently of its table."""

    type: ListingType
    id: int

    @classmethod
    def of(cls, listing_type: ListingType | str, listing_id: int) -> "ListingRef":
        return cls(type=resolve(listing_type).listing_type, id=listing_id)


_DESCRIPTORS: dict[ListingType, ListingTypeDescriptor] = {
    ListingType.SERVICE: ListingTypeDescriptor(
        listing_type=ListingType.SERVICE,
        model=ServiceListing,
        owner_role=ListingParty.PERFORMER,
        status_on_confirm=ListingStatus.IN_PROGRESS,
    ),
    ListingType.AD: ListingTypeDescriptor(
        listing_type=ListingType.AD,
        model=AdListing,
        owner_role=ListingParty.CLIENT,
        status_on_confirm=ListingStatus.IN_PROGRESS,
    ),
    ListingType.RENT: ListingTypeDescriptor(
        listing_type=ListingType.RENT,
        model=RentListing,
        owner_role=ListingParty.CLIENT,
        status_on_confirm=ListingStatus.IN_PROGRESS,
    ),
    # Rent and work ads stay listed while an engagement runs
    ListingType.RENT_AD: ListingTypeDescriptor(
        listing_type=ListingType.RENT_AD,
        model=RentAdListing,
        owner_role=ListingParty.CLIENT,
        status_on_confirm=None,
    ),
    ListingType.WORK: ListingTypeDescriptor(
        listing_type=ListingType.WORK,
        model=WorkListing,
        owner_role=ListingParty.PERFORMER,
        status_on_confirm=ListingStatus.IN_PROGRESS,
    ),
    ListingType.WORK_AD: ListingTypeDescriptor(
        listing_type=ListingType.WORK_AD,
        model=WorkAdListing,
        owner_role=ListingParty.CLIENT,
        status_on_confirm=None,
    ),
}

_missing = set(ListingType) - set(_DESCRIPTORS)
if _missing:
    raise RuntimeError(f"Listing types without a descriptor: {sorted(t.value for t in _missing)}")


def resolve(listing_type: ListingType | str) -> ListingTypeDescriptor:
    """Return the descriptor for a listing type tag or enum member."""
    if isinstance(listing_type, ListingType):
        return _DESCRIPTORS[listing_type]
    tag = (listing_type or "").strip()
    if not ListingType.has_value(tag):
        raise InvalidListingTypeError(f"Unsupported listing type: {listing_type!r}")
    return _DESCRIPTORS[ListingType(tag)]


def all_descriptors() -> list[ListingTypeDescriptor]:
    """All descriptors in ListingType declaration order."""
    return [_DESCRIPTORS[listing_type] for listing_type in ListingType]
