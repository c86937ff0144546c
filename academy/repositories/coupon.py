# academy/repositories/coupon.py
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from academy.core.decorator import db_exception
from academy.models.coupon import Coupon
from academy.models.coupon_usage import CouponUsage


@db_exception
def get_coupon(db: Session, coupon_id: int) -> Optional[Coupon]:
    return db.query(Coupon).filter(Coupon.id == coupon_id).first()


@db_exception
def get_coupon_by_code(db: Session, code: str) -> Optional[Coupon]:
    return db.query(Coupon).filter(Coupon.code == code.strip().upper()).first()


@db_exception
def has_user_used_coupon(db: Session, coupon_id: int, user_id: int) -> bool:
    return (
        db.query(CouponUsage.id)
        .filter(CouponUsage.coupon_id == coupon_id, CouponUsage.user_id == user_id)
        .first()
        is not None
    )


@db_exception
def claim_coupon_use(db: Session, coupon_id: int) -> bool:
    """
    Increment used_count only while the coupon still has uses left.

    The check and the increment happen in one UPDATE statement, so two
    concurrent redemptions cannot both take the last use. Returns False
    when no row was updated.
    """
    result = db.execute(
        update(Coupon)
        .where(
            Coupon.id == coupon_id,
            Coupon.is_active == True,
            or_(Coupon.max_uses.is_(None), Coupon.used_count < Coupon.max_uses),
        )
        .values(used_count=Coupon.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


@db_exception
def add_coupon_usage(
    db: Session,
    coupon_id: int,
    user_id: int,
    enrollment_id: Optional[int],
    original_price: Decimal,
    discount_amount: Decimal,
    final_price: Decimal,
) -> CouponUsage:
    usage = CouponUsage(
        coupon_id=coupon_id,
        user_id=user_id,
        enrollment_id=enrollment_id,
        original_price=original_price,
        discount_amount=discount_amount,
        final_price=final_price,
    )
    db.add(usage)
    db.flush()
    return usage
