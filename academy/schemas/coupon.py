# academy/schemas/coupon.py
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CouponType = Literal["percentage", "fixed", "free"]


class CouponValidity(BaseModel):
    """Structured result of the coupon rules; never raised."""

    valid: bool
    reason: Optional[str] = None


class CouponBase(BaseModel):
    code: str = Field(..., min_length=3, max_length=50)
    type: CouponType = "percentage"
    value: Decimal = Field(0, ge=0)
    max_uses: Optional[int] = Field(None, ge=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    course_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=255)
    min_purchase_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def check_values(self):
        if self.type == "percentage" and self.value > 100:
            raise ValueError("Percentage coupons cannot exceed 100")
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise ValueError("valid_to must be after valid_from")
        return self


class CouponCreate(CouponBase):
    pass


class CouponUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=3, max_length=50)
    type: Optional[CouponType] = None
    value: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    course_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=255)
    min_purchase_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value else value


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    type: str
    value: Decimal
    max_uses: Optional[int] = None
    used_count: int
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    course_id: Optional[int] = None
    description: Optional[str] = None
    min_purchase_amount: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    is_active: bool
    created_at: datetime


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    course_id: int


class CouponQuote(BaseModel):
    coupon_id: int
    code: str
    type: str
    value: Decimal
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal


class CouponAnalytics(BaseModel):
    total_coupons: int
    active_coupons: int
    total_redemptions: int
    total_discount_given: Decimal
