# academy/routers/coupon.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_current_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.coupon import (
    CouponAnalytics,
    CouponCreate,
    CouponQuote,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
)
from academy.services.coupon import CouponService

router = APIRouter(
    prefix="/coupons",
    tags=["Coupons"],
    responses={404: {"description": "Not found"}},
)


# ==================== Student Endpoints ====================


@router.post("/validate", response_model=CouponQuote)
def validate_coupon(
    request: CouponValidateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Check a coupon against a course and return the discounted price.
    Returns 400 with the reason when the coupon cannot be used.
    """
    validity, quote = CouponService(db).quote(
        request.code, request.course_id, current_user.id
    )
    if not validity.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=validity.reason
        )
    return quote


# ==================== Admin Endpoints ====================


@router.post("/", response_model=CouponResponse, status_code=201)
def create_coupon(
    coupon_in: CouponCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return CouponService(db).create_coupon(coupon_in, current_admin.id)


@router.get("/")
def list_coupons(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    is_active: Optional[bool] = Query(None),
    course_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    coupons, pagination = CouponService(db).get_coupons(
        page=page, size=size, is_active=is_active, course_id=course_id
    )
    return {
        "coupons": [CouponResponse.model_validate(c) for c in coupons],
        **pagination,
    }


@router.get("/analytics", response_model=CouponAnalytics)
def get_coupon_analytics(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return CouponService(db).get_analytics()


@router.get("/{coupon_id}", response_model=CouponResponse)
def get_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return CouponService(db).get_coupon(coupon_id)


@router.patch("/{coupon_id}", response_model=CouponResponse)
def update_coupon(
    coupon_id: int,
    coupon_in: CouponUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return CouponService(db).update_coupon(coupon_id, coupon_in)


@router.delete("/{coupon_id}", response_model=CouponResponse)
def deactivate_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """Soft delete: the coupon is deactivated, its usage history is kept."""
    return CouponService(db).deactivate_coupon(coupon_id)
