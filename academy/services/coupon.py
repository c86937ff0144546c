# academy/services/coupon.py
import logging
import math
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from academy.core.decorator import NotFoundException
from academy.models.coupon import Coupon
from academy.models.coupon_usage import CouponUsage
from academy.repositories import coupon as coupon_repo
from academy.repositories import course as course_repo
from academy.schemas.coupon import (
    CouponCreate,
    CouponQuote,
    CouponUpdate,
    CouponValidity,
)
from academy.utils.coupon_rules import calculate_discount, final_price, validate_coupon

logger = logging.getLogger(__name__)


class CouponService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Admin ====================

    def create_coupon(self, coupon_in: CouponCreate, admin_id: int) -> Coupon:
        if coupon_repo.get_coupon_by_code(self.db, coupon_in.code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Coupon code already exists",
            )
        if coupon_in.course_id and not course_repo.get_course(
            self.db, coupon_in.course_id
        ):
            raise NotFoundException("Course not found")

        coupon = Coupon(**coupon_in.model_dump(), created_by=admin_id, used_count=0)
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)

        logger.info(f"Coupon {coupon.code} created by admin {admin_id}")
        return coupon

    def get_coupons(
        self,
        page: int = 1,
        size: int = 20,
        is_active: Optional[bool] = None,
        course_id: Optional[int] = None,
    ) -> Tuple[List[Coupon], dict]:
        query = self.db.query(Coupon)

        if is_active is not None:
            query = query.filter(Coupon.is_active == is_active)
        if course_id is not None:
            query = query.filter(Coupon.course_id == course_id)

        total = query.count()

        offset = (page - 1) * size
        coupons = (
            query.order_by(Coupon.created_at.desc(), Coupon.id.desc())
            .offset(offset)
            .limit(size)
            .all()
        )

        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }

        return coupons, pagination

    def get_coupon(self, coupon_id: int) -> Coupon:
        coupon = coupon_repo.get_coupon(self.db, coupon_id)
        if not coupon:
            raise NotFoundException("Coupon not found")
        return coupon

    def update_coupon(self, coupon_id: int, coupon_in: CouponUpdate) -> Coupon:
        coupon = self.get_coupon(coupon_id)
        data = coupon_in.model_dump(exclude_unset=True)

        if "code" in data and data["code"] != coupon.code:
            if coupon_repo.get_coupon_by_code(self.db, data["code"]):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Coupon code already exists",
                )

        for field, value in data.items():
            setattr(coupon, field, value)

        if coupon.type == "percentage" and Decimal(str(coupon.value)) > 100:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Percentage coupons cannot exceed 100",
            )

        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def deactivate_coupon(self, coupon_id: int) -> Coupon:
        coupon = self.get_coupon(coupon_id)
        coupon.is_active = False
        self.db.commit()
        self.db.refresh(coupon)
        logger.info(f"Coupon {coupon.code} deactivated")
        return coupon

    def get_analytics(self) -> dict:
        total_coupons = self.db.query(func.count(Coupon.id)).scalar() or 0
        active_coupons = (
            self.db.query(func.count(Coupon.id))
            .filter(Coupon.is_active == True)
            .scalar()
            or 0
        )
        total_redemptions = self.db.query(func.count(CouponUsage.id)).scalar() or 0
        total_discount = (
            self.db.query(func.sum(CouponUsage.discount_amount)).scalar() or 0
        )
        return {
            "total_coupons": total_coupons,
            "active_coupons": active_coupons,
            "total_redemptions": total_redemptions,
            "total_discount_given": Decimal(str(total_discount)).quantize(
                Decimal("0.01")
            ),
        }

    def deactivate_expired(self, now: Optional[datetime] = None) -> int:
        """Turn off active coupons whose validity window has closed."""
        now = now or datetime.utcnow()
        count = (
            self.db.query(Coupon)
            .filter(
                Coupon.is_active == True,
                Coupon.valid_to.isnot(None),
                Coupon.valid_to < now,
            )
            .update({Coupon.is_active: False}, synchronize_session=False)
        )
        self.db.commit()
        return count

    # ==================== Student ====================

    def quote(
        self, code: str, course_id: int, user_id: int
    ) -> Tuple[CouponValidity, Optional[CouponQuote]]:
        """
        Check a coupon for a user and course and price it.

        Invalid coupons come back as ``CouponValidity(valid=False, reason)``
        with no quote.
        """
        course = course_repo.get_course(self.db, course_id)
        if not course:
            raise NotFoundException("Course not found")

        coupon = coupon_repo.get_coupon_by_code(self.db, code)
        if not coupon:
            return CouponValidity(valid=False, reason="Invalid coupon code"), None

        validity = validate_coupon(coupon)
        if not validity.valid:
            return validity, None

        if coupon.course_id is not None and coupon.course_id != course_id:
            return (
                CouponValidity(valid=False, reason="Coupon not valid for this course"),
                None,
            )

        if coupon_repo.has_user_used_coupon(self.db, coupon.id, user_id):
            return (
                CouponValidity(valid=False, reason="You have already used this coupon"),
                None,
            )

        original_price = Decimal(str(course.effective_price or 0))
        if (
            coupon.min_purchase_amount is not None
            and original_price < Decimal(str(coupon.min_purchase_amount))
        ):
            return (
                CouponValidity(
                    valid=False,
                    reason=f"Minimum purchase amount is {coupon.min_purchase_amount}",
                ),
                None,
            )

        discount = calculate_discount(coupon, original_price)
        quote = CouponQuote(
            coupon_id=coupon.id,
            code=coupon.code,
            type=coupon.type,
            value=coupon.value,
            original_price=original_price,
            discount_amount=discount,
            final_price=final_price(original_price, discount),
        )
        return CouponValidity(valid=True), quote

    def redeem(
        self, quote: CouponQuote, user_id: int, enrollment_id: Optional[int]
    ) -> CouponUsage:
        """
        Consume one use of the coupon and record the usage.

        Does not commit; the caller commits together with the enrollment.
        """
        if not coupon_repo.claim_coupon_use(self.db, quote.coupon_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Coupon usage limit reached",
            )

        usage = coupon_repo.add_coupon_usage(
            self.db,
            coupon_id=quote.coupon_id,
            user_id=user_id,
            enrollment_id=enrollment_id,
            original_price=quote.original_price,
            discount_amount=quote.discount_amount,
            final_price=quote.final_price,
        )
        logger.info(f"Coupon {quote.code} redeemed by user {user_id}")
        return usage
