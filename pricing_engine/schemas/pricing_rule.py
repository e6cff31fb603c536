from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from pricing_engine.enums.pricing import AdjustmentType, RuleApplyTo, RuleType


class PricingRuleBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    rule_type: RuleType
    adjustment_type: AdjustmentType
    # magnitude only; direction comes from rule_type
    adjustment_value: float = Field(ge=0, allow_inf_nan=False)
    apply_to: RuleApplyTo = RuleApplyTo.all
    category_ids: List[str] = []
    subcategory_ids: List[str] = []
    conditions: List[str] = []
    brands: List[str] = []
    min_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    priority: int = 0
    is_active: bool = True

    @model_validator(mode="after")
    def check_price_bounds(self):
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price must not exceed max_price")
        return self


class PricingRuleCreate(PricingRuleBase):
    pass


class PricingRuleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    rule_type: Optional[RuleType] = None
    adjustment_type: Optional[AdjustmentType] = None
    adjustment_value: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    apply_to: Optional[RuleApplyTo] = None
    category_ids: Optional[List[str]] = None
    subcategory_ids: Optional[List[str]] = None
    conditions: Optional[List[str]] = None
    brands: Optional[List[str]] = None
    min_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class PricingRuleResponse(PricingRuleBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PricingRulePreviewItem(BaseModel):
    id: str
    name: str
    sku: str
    current_price: float
    new_price: float
    change: float
    change_percent: float


class PricingRulePreviewResponse(BaseModel):
    rule_id: int
    affected_products: int
    total_current_value: float
    total_new_value: float
    average_change: float
    products: List[PricingRulePreviewItem]
