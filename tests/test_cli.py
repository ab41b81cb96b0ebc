from click.testing import CliRunner
from sqlalchemy.orm import sessionmaker

from marketplace import cli as cli_module
from marketplace.db.enums import ListingType
from marketplace.services import top_service


def _use_test_db(monkeypatch, db_engine):
    monkeypatch.setattr(
        cli_module,
        "SessionLocal",
        sessionmaker(autocommit=False, autoflush=False, bind=db_engine),
    )


def test_activate_and_show_top(db, db_engine, make_listing, monkeypatch):
    _use_test_db(monkeypatch, db_engine)
    listing = make_listing(ListingType.RENT_AD, user_id=3)
    runner = CliRunner()

    result = runner.invoke(
        cli_module.cli,
        ["activate-top", "--listing-type", "rent_ad", "--listing-id", str(listing.id), "--days", "5"],
    )
    assert result.exit_code == 0, result.output
    assert "Top activated" in result.output
    assert top_service.get_top(db, "rent_ad", listing.id).duration_days == 5

    result = runner.invoke(
        cli_module.cli,
        ["show-top", "--listing-type", "rent_ad", "--listing-id", str(listing.id)],
    )
    assert result.exit_code == 0, result.output
    assert "active" in result.output


def test_cli_reports_errors(db_engine, make_listing, monkeypatch):
    _use_test_db(monkeypatch, db_engine)
    listing = make_listing(ListingType.AD, user_id=3)
    runner = CliRunner()

    result = runner.invoke(
        cli_module.cli,
        ["activate-top", "--listing-type", "ad", "--listing-id", str(listing.id), "--days", "0"],
    )
    assert "Error" in result.output

    result = runner.invoke(
        cli_module.cli,
        ["show-top", "--listing-type", "boat", "--listing-id", "1"],
    )
    assert "Error" in result.output

    result = runner.invoke(
        cli_module.cli,
        ["show-top", "--listing-type", "ad", "--listing-id", str(listing.id)],
    )
    assert "No promotion" in result.output


def test_activate_top_out_of_range_duration(db_engine, make_listing, monkeypatch):
    _use_test_db(monkeypatch, db_engine)
    listing = make_listing(ListingType.WORK_AD, user_id=3)

    result = CliRunner().invoke(
        cli_module.cli,
        ["activate-top", "--listing-type", "work_ad", "--listing-id", str(listing.id), "--days", "4000000"],
    )

    assert result.exit_code == 0, result.output
    assert "Error" in result.output
