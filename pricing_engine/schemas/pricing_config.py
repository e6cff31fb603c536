from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PricingConfigResponse(BaseModel):
    id: int
    default_markup_percent: float
    minimum_margin: float
    rounding_rule: str
    min_price_new_with_tags: float
    min_price_new_without_tags: float
    min_price_like_new: float
    min_price_good: float
    min_price_fair: float
    min_price_poor: float
    updated_by: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class PricingConfigUpdate(BaseModel):
    default_markup_percent: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    minimum_margin: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    rounding_rule: Optional[str] = None
    min_price_new_with_tags: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    min_price_new_without_tags: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    min_price_like_new: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    min_price_good: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    min_price_fair: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    min_price_poor: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
