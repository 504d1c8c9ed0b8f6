from datetime import date, datetime
from decimal import Decimal

import pytest

from thriftmarket.models.order import CANCEL_REQUESTED, CANCELLED, CONFIRMED, DELIVERED, PENDING, SHIPPED
from thriftmarket.services.notification_service import build_notification, preview
from thriftmarket.services.order_service import (
    can_transition,
    compute_total,
    format_money,
    parse_delivery_date,
)
from thriftmarket.services.rating_service import validate_rating
from thriftmarket.utils.exceptions import ValidationError


@pytest.mark.parametrize("current,new", [
    (PENDING, CONFIRMED),
    (PENDING, CANCELLED),
    (PENDING, CANCEL_REQUESTED),
    (CONFIRMED, SHIPPED),
    (CONFIRMED, CANCEL_REQUESTED),
    (SHIPPED, DELIVERED),
    (CANCEL_REQUESTED, CANCELLED),
    (CANCEL_REQUESTED, CONFIRMED),
])
def test_legal_edges(current, new):
    assert can_transition(current, new)


@pytest.mark.parametrize("current,new", [
    (PENDING, SHIPPED),
    (PENDING, DELIVERED),
    (SHIPPED, CANCELLED),
    (SHIPPED, CANCEL_REQUESTED),
    (DELIVERED, CANCELLED),
    (CANCELLED, PENDING),
    (CANCEL_REQUESTED, SHIPPED),
])
def test_illegal_edges(current, new):
    assert not can_transition(current, new)


def test_compute_total_rounds_to_cents():
    assert compute_total("19.995", 1) == Decimal("20.00")
    assert compute_total(Decimal("450.00"), 2) == Decimal("900.00")


def test_format_money_uses_configured_symbol(app):
    assert format_money(Decimal("450")) == "₱450.00"
    app.config["CURRENCY_SYMBOL"] = "$"
    assert format_money(12.5) == "$12.50"


def test_parse_delivery_date():
    assert parse_delivery_date("2030-05-01") == date(2030, 5, 1)
    assert parse_delivery_date(date(2030, 5, 1)) == date(2030, 5, 1)
    assert parse_delivery_date(datetime(2030, 5, 1, 9, 30)) == date(2030, 5, 1)
    with pytest.raises(ValidationError):
        parse_delivery_date("")
    with pytest.raises(ValidationError):
        parse_delivery_date("not a date")


def test_preview_truncates_long_text():
    assert preview("short") == "short"
    assert preview("x" * 60) == "x" * 50 + "..."
    assert preview(None) == ""


def test_build_notification_rejects_unknown_type():
    with pytest.raises(ValueError):
        build_notification("usr-1", "promo", "Hi", "There")


@pytest.mark.parametrize("value", [0, 6, True, "5", 4.5, None])
def test_validate_rating_rejects(value):
    with pytest.raises(ValidationError):
        validate_rating(value)


def test_validate_rating_accepts_range():
    assert [validate_rating(v) for v in range(1, 6)] == [1, 2, 3, 4, 5]
