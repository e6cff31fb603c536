from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from pricing_engine.enums.pricing import AdjustmentType, RuleApplyTo


class BulkPriceAdjustRequest(BaseModel):
    """Signed adjustment: negative values lower prices."""
    adjustment_type: AdjustmentType
    adjustment_value: float = Field(allow_inf_nan=False)
    apply_to: RuleApplyTo = RuleApplyTo.all
    category_ids: List[str] = []
    subcategory_ids: List[str] = []
    conditions: List[str] = []
    brands: List[str] = []
    min_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def check_price_bounds(self):
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price must not exceed max_price")
        return self


class CustomPriceItem(BaseModel):
    # loosely typed on purpose: bad entries are skipped, not rejected
    product_id: Any = None
    new_price: Any = None


class BulkCustomPriceRequest(BaseModel):
    prices: List[CustomPriceItem] = Field(min_length=1)


class RevertPriceChangesRequest(BaseModel):
    bulk_update_id: int


class BulkMutationResponse(BaseModel):
    message: str
    bulk_update_id: Optional[int] = None
    updated_count: int
    skipped_count: int = 0
    conflicts: List[str] = []
    failed: List[str] = []


class CustomPriceResponse(BaseModel):
    message: str
    updated_count: int


class RevertResponse(BaseModel):
    message: str
    bulk_update_id: int
    reverted_count: int
    conflicts: List[str] = []
