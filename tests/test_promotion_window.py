import logging
from datetime import datetime, timedelta, timezone

import pytest

from marketplace.services import promotion_window
from marketplace.services.promotion_window import InvalidDurationError, PromotionWindow


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_encode_seven_day_window():
    window = promotion_window.encode(_utc(2024, 1, 1), 7)

    assert window.activated_at == _utc(2024, 1, 1)
    assert window.expires_at == _utc(2024, 1, 8)
    assert window.duration_days == 7


def test_window_expires_at_boundary():
    window = promotion_window.encode(_utc(2024, 1, 1), 7)

    assert promotion_window.is_active(window, _utc(2024, 1, 7, 23, 59, 59)) is True
    assert promotion_window.is_active(window, _utc(2024, 1, 8, 0, 0, 0)) is False
    assert promotion_window.is_active(window, _utc(2024, 1, 8, 0, 0, 1)) is False


def test_window_inactive_before_activation():
    window = promotion_window.encode(_utc(2024, 1, 1), 7)
    assert promotion_window.is_active(window, _utc(2023, 12, 31, 23, 59, 59)) is False
    assert window.is_active(_utc(2024, 1, 1)) is True


def test_encode_normalizes_to_utc():
    plus_three = timezone(timedelta(hours=3))
    window = promotion_window.encode(datetime(2024, 1, 1, 3, 0, tzinfo=plus_three), 1)

    assert window.activated_at == _utc(2024, 1, 1)
    assert window.activated_at.utcoffset() == timedelta(0)
    assert window.expires_at == _utc(2024, 1, 2)


@pytest.mark.parametrize("days", [0, -1, 1.5, "7", True, None, 4_000_000, 1_000_000_000])
def test_encode_rejects_invalid_duration(days):
    with pytest.raises(InvalidDurationError):
        promotion_window.encode(_utc(2024, 1, 1), days)


def test_serialized_window_decodes_to_same_values():
    window = promotion_window.encode(_utc(2024, 3, 10, 12, 30), 30)

    decoded = promotion_window.decode(promotion_window.serialize(window))

    assert decoded == window


def test_decode_legacy_bare_timestamp_is_expired():
    window = promotion_window.decode("2024-01-01T00:00:00Z")

    assert window is not None
    assert window.activated_at == window.expires_at == _utc(2024, 1, 1)
    assert promotion_window.is_active(window, _utc(2024, 1, 1)) is False


def test_decode_zero_time_means_unset():
    raw = '{"activated_at": "0001-01-01T00:00:00Z", "expires_at": "0001-01-01T00:00:00Z"}'

    window = promotion_window.decode(raw)

    assert window == PromotionWindow()
    assert promotion_window.is_active(window) is False


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_decode_empty_is_none(raw):
    assert promotion_window.decode(raw) is None


@pytest.mark.parametrize("raw", ["not a date", "{\"activated_at\": 12", "2024-01-01T00:00:00"])
def test_decode_garbage_is_none_and_logged(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="marketplace.services.promotion_window"):
        assert promotion_window.decode(raw) is None

    assert "unparseable promotion payload" in caplog.text


def test_is_active_none_window():
    assert promotion_window.is_active(None, _utc(2024, 1, 1)) is False


def test_naive_now_is_treated_as_utc():
    window = promotion_window.encode(_utc(2024, 1, 1), 1)
    assert promotion_window.is_active(window, datetime(2024, 1, 1, 12)) is True


@pytest.mark.parametrize(
    "raw",
    [
        "9999-12-31T23:00:00-05:00",
        '{"activated_at": "9999-12-31T23:00:00-05:00", "expires_at": "9999-12-31T23:00:00-05:00"}',
        '{"activated_at": "2024-01-01T00:00:00Z", "expires_at": "9999-12-31T23:00:00-05:00"}',
    ],
)
def test_decode_out_of_range_timestamp_is_none(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="marketplace.services.promotion_window"):
        assert promotion_window.decode(raw) is None

    assert "unparseable promotion payload" in caplog.text
