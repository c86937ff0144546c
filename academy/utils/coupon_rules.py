"""
Coupon validity and discount rules.

Both functions take the coupon record as a parameter so they work on the
ORM row as well as on any object exposing the same attributes.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from academy.schemas.coupon import CouponValidity

CENT = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_coupon(coupon, now: Optional[datetime] = None) -> CouponValidity:
    """Check the coupon's own rules; the first failing rule wins."""
    now = _as_utc(now or datetime.utcnow())

    if not coupon.is_active:
        return CouponValidity(valid=False, reason="Coupon is inactive")

    if coupon.max_uses is not None and (coupon.used_count or 0) >= coupon.max_uses:
        return CouponValidity(valid=False, reason="Coupon usage limit reached")

    if coupon.valid_from and now < _as_utc(coupon.valid_from):
        return CouponValidity(valid=False, reason="Coupon is not yet active")

    if coupon.valid_to and now > _as_utc(coupon.valid_to):
        return CouponValidity(valid=False, reason="Coupon has expired")

    return CouponValidity(valid=True)


def calculate_discount(coupon, original_price) -> Decimal:
    """Discount amount, always between 0 and ``original_price``."""
    price = _to_decimal(original_price)
    if price <= 0:
        return Decimal("0.00")

    value = _to_decimal(coupon.value)
    discount = Decimal("0")

    if coupon.type == "percentage":
        discount = price * value / Decimal("100")
        if coupon.max_discount_amount is not None:
            discount = min(discount, _to_decimal(coupon.max_discount_amount))
    elif coupon.type == "fixed":
        discount = value
    elif coupon.type == "free":
        discount = price

    discount = max(Decimal("0"), min(discount, price))
    return discount.quantize(CENT, rounding=ROUND_HALF_UP)


def final_price(original_price, discount) -> Decimal:
    price = _to_decimal(original_price)
    return max(Decimal("0"), price - _to_decimal(discount)).quantize(
        CENT, rounding=ROUND_HALF_UP
    )
