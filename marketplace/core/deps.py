"""FastAPI dependencies for database access and the acting user."""

from typing import Generator

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session

from marketplace.db.session import SessionLocal
from marketplace.services.listing_registry import InvalidListingTypeError, ListingRef


# Header carrying the acting user id, set by the upstream auth layer
USER_ID_HEADER = "X-User-ID"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
) -> int:
    """
    Acting user id from the trusted upstream header.

    Raises:
        HTTPException 401: header missing or not a positive integer
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user id")
    if user_id <= 0:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user id")
    return user_id


def get_listing_ref(listing_type: str, listing_id: int) -> ListingRef:
    """Resolve ``/listings/{listing_type}/{listing_id}`` path params."""
    try:
        return ListingRef.of(listing_type, listing_id)
    except InvalidListingTypeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
