from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from academy.utils.coupon_rules import calculate_discount, final_price, validate_coupon


def coupon(**fields):
    data = {
        "type": "percentage",
        "value": Decimal("10"),
        "max_uses": None,
        "used_count": 0,
        "valid_from": None,
        "valid_to": None,
        "max_discount_amount": None,
        "is_active": True,
    }
    data.update(fields)
    return SimpleNamespace(**data)


# ==================== Discounts ====================


def test_percentage_discount_is_capped():
    c = coupon(type="percentage", value=Decimal("50"), max_discount_amount=Decimal("20"))
    assert calculate_discount(c, Decimal("100")) == Decimal("20.00")


def test_percentage_discount_without_cap():
    c = coupon(type="percentage", value=Decimal("25"))
    assert calculate_discount(c, Decimal("80")) == Decimal("20.00")


def test_fixed_discount_never_exceeds_price():
    c = coupon(type="fixed", value=Decimal("30"))
    assert calculate_discount(c, Decimal("20")) == Decimal("20.00")
    assert final_price(Decimal("20"), Decimal("20.00")) == Decimal("0.00")


def test_free_coupon_discounts_whole_price():
    c = coupon(type="free", value=Decimal("0"))
    assert calculate_discount(c, Decimal("49.99")) == Decimal("49.99")


def test_discount_rounds_to_cents_half_up():
    c = coupon(type="percentage", value=Decimal("10"))
    assert calculate_discount(c, Decimal("99.95")) == Decimal("10.00")
    assert calculate_discount(c, Decimal("0.05")) == Decimal("0.01")


def test_zero_price_gives_zero_discount():
    c = coupon(type="fixed", value=Decimal("10"))
    assert calculate_discount(c, Decimal("0")) == Decimal("0.00")


def test_negative_value_is_clamped_to_zero():
    c = coupon(type="fixed", value=Decimal("-5"))
    assert calculate_discount(c, Decimal("50")) == Decimal("0.00")


def test_discount_accepts_floats_and_strings():
    c = coupon(type="percentage", value=20)
    assert calculate_discount(c, "50") == Decimal("10.00")
    assert calculate_discount(c, 50.0) == Decimal("10.00")


def test_discount_stays_within_price_for_many_inputs():
    for kind in ("percentage", "fixed", "free"):
        for value in (0, 1, 15, 100, 250):
            for price in ("0.01", "1", "19.99", "100", "1000"):
                d = calculate_discount(coupon(type=kind, value=value), Decimal(price))
                assert Decimal("0") <= d <= Decimal(price)


# ==================== Validity ====================


def test_valid_coupon():
    result = validate_coupon(coupon())
    assert result.valid is True
    assert result.reason is None


def test_inactive_coupon():
    result = validate_coupon(coupon(is_active=False))
    assert result.valid is False
    assert result.reason == "Coupon is inactive"


def test_usage_limit_reached():
    result = validate_coupon(coupon(max_uses=3, used_count=3))
    assert result.reason == "Coupon usage limit reached"


def test_zero_max_uses_allows_no_redemptions():
    assert validate_coupon(coupon(max_uses=0)).reason == "Coupon usage limit reached"


def test_unlimited_uses():
    assert validate_coupon(coupon(max_uses=None, used_count=10_000)).valid is True


def test_not_yet_active():
    now = datetime(2026, 1, 1, 12, 0)
    c = coupon(valid_from=now + timedelta(days=1))
    assert validate_coupon(c, now=now).reason == "Coupon is not yet active"


def test_expired():
    now = datetime(2026, 1, 1, 12, 0)
    c = coupon(valid_to=now - timedelta(seconds=1))
    assert validate_coupon(c, now=now).reason == "Coupon has expired"


def test_expired_with_default_clock():
    c = coupon(valid_to=datetime.utcnow() - timedelta(days=1))
    result = validate_coupon(c)
    assert result.valid is False
    assert result.reason == "Coupon has expired"


def test_first_failing_rule_wins():
    now = datetime(2026, 1, 1, 12, 0)
    c = coupon(
        is_active=False,
        max_uses=1,
        used_count=1,
        valid_to=now - timedelta(days=1),
    )
    assert validate_coupon(c, now=now).reason == "Coupon is inactive"

    c.is_active = True
    assert validate_coupon(c, now=now).reason == "Coupon usage limit reached"


def test_timezone_aware_dates_are_compared_in_utc():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    # 13:00 at UTC+2 is 11:00 UTC, one hour before now
    plus_two = timezone(timedelta(hours=2))
    c = coupon(valid_to=datetime(2026, 1, 1, 13, 0, tzinfo=plus_two))
    assert validate_coupon(c, now=now).reason == "Coupon has expired"

    c = coupon(valid_to=datetime(2026, 1, 1, 15, 0, tzinfo=plus_two))
    assert validate_coupon(c, now=now).valid is True
