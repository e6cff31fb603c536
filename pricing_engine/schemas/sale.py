from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from pricing_engine.core.clock import as_naive_utc
from pricing_engine.enums.pricing import DiscountType, SaleApplyTo, SaleStatus


# ---------- Sale main schemas ----------

class SaleBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float = Field(gt=0, allow_inf_nan=False)
    apply_to: SaleApplyTo = SaleApplyTo.all
    category_ids: List[str] = []
    product_ids: List[str] = []
    tags: List[str] = []
    starts_at: datetime
    ends_at: datetime
    is_active: bool = True
    show_countdown: bool = False
    banner_text: Optional[str] = None
    banner_color: Optional[str] = "#FF5733"

    @field_validator("starts_at", "ends_at")
    @classmethod
    def normalise_timestamps(cls, value: datetime) -> datetime:
        return as_naive_utc(value)

    @model_validator(mode="after")
    def check_sale(self):
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        if self.discount_type == DiscountType.percentage and self.discount_value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class SaleCreate(SaleBase):
    pass


class SaleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    apply_to: Optional[SaleApplyTo] = None
    category_ids: Optional[List[str]] = None
    product_ids: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    is_active: Optional[bool] = None
    show_countdown: Optional[bool] = None
    banner_text: Optional[str] = None
    banner_color: Optional[str] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def normalise_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)


class SaleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    discount_type: str
    discount_value: float
    apply_to: str
    category_ids: List[str] = []
    product_ids: List[str] = []
    tags: List[str] = []
    starts_at: datetime
    ends_at: datetime
    is_active: bool
    show_countdown: bool
    banner_text: Optional[str] = None
    banner_color: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    computed_status: Optional[SaleStatus] = None

    class Config:
        from_attributes = True


class SalePageMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class SalePageResponse(BaseModel):
    sales: List[SaleResponse]
    pagination: SalePageMeta


# ---------- Countdown / public schemas ----------

class Countdown(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int
    expired: bool


class ActiveSaleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    discount_type: str
    discount_value: float
    show_countdown: bool
    banner_text: Optional[str] = None
    banner_color: Optional[str] = None
    ends_at: datetime
    countdown: Countdown


class SaleCountdownResponse(BaseModel):
    id: int
    name: str
    is_active: bool
    show_countdown: bool
    banner_text: Optional[str] = None
    banner_color: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    countdown: Optional[Countdown] = None


class SaleReconcileResponse(BaseModel):
    applied: int
    removed: int
