from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from pricing_engine.core.clock import as_naive_utc
from pricing_engine.enums.product import ItemCondition, ProductStatus


class ProductBase(BaseModel):
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: float = Field(gt=0, allow_inf_nan=False)
    compare_at_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    status: ProductStatus = ProductStatus.ACTIVE
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    condition: Optional[ItemCondition] = None
    brand: Optional[str] = None
    tags: List[str] = []


class ProductCreate(ProductBase):
    id: Optional[str] = None


class ProductResponse(ProductBase):
    id: str
    is_on_sale: bool
    sale_percentage: Optional[float] = None
    sale_amount: Optional[float] = None
    sale_ends_at: Optional[datetime] = None
    active_sale_id: Optional[int] = None
    sale_price: Optional[float] = None
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductPriceUpdate(BaseModel):
    price: float = Field(gt=0, allow_inf_nan=False)


class BulkProductSaleRequest(BaseModel):
    product_ids: List[str] = Field(min_length=1)
    is_on_sale: bool
    sale_percentage: Optional[float] = Field(default=None, gt=0, le=100, allow_inf_nan=False)
    sale_ends_at: Optional[datetime] = None

    @field_validator("sale_ends_at")
    @classmethod
    def normalise_ends_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)


class UpdatedCountResponse(BaseModel):
    message: str
    updated_count: int
