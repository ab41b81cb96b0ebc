"""CLI tools for marketplace administration."""

import click

from marketplace.db.session import SessionLocal
from marketplace.services import promotion_window, top_service
from marketplace.services.listing_registry import InvalidListingTypeError
from marketplace.services.listing_store import ListingNotFoundError
from marketplace.services.promotion_window import InvalidDurationError


@click.group()
def cli():
    """Marketplace CLI tools."""
    pass


@cli.command()
@click.option("--listing-type", required=True, help="Listing type (service, ad, rent, rent_ad, work, work_ad)")
@click.option("--listing-id", required=True, type=int, help="Listing ID")
@click.option("--days", required=True, type=int, help="Promotion length in days")
def activate_top(listing_type: str, listing_id: int, days: int):
    """
    Boost a listing without an ownership check (support/backoffice use).

    Example:
        python -m marketplace.cli activate-top --listing-type ad --listing-id 42 --days 7
    """
    db = SessionLocal()
    try:
        window = top_service.activate_top(db, listing_type, listing_id, days)
        click.echo(f"✓ Top activated on {listing_type} {listing_id}")
        click.echo(f"  Expires: {window.expires_at.isoformat()}")
    except (InvalidListingTypeError, InvalidDurationError, ListingNotFoundError) as e:
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--listing-type", required=True, help="Listing type")
@click.option("--listing-id", required=True, type=int, help="Listing ID")
def show_top(listing_type: str, listing_id: int):
    """
    Show the stored promotion window of a listing.

    Example:
        python -m marketplace.cli show-top --listing-type service --listing-id 7
    """
    db = SessionLocal()
    try:
        window = top_service.get_top(db, listing_type, listing_id)
        if window is None:
            click.echo(f"No promotion on {listing_type} {listing_id}")
            return
        state = "active" if promotion_window.is_active(window) else "inactive"
        click.echo(f"{listing_type} {listing_id}: {state}")
        click.echo(f"  Activated: {window.activated_at.isoformat() if window.activated_at else '-'}")
        click.echo(f"  Expires: {window.expires_at.isoformat() if window.expires_at else '-'}")
    except (InvalidListingTypeError, ListingNotFoundError) as e:
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
