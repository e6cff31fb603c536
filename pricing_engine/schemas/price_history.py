from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class PriceHistoryResponse(BaseModel):
    id: int
    product_id: str
    previous_price: float
    new_price: float
    change_reason: str
    rule_id: Optional[int] = None
    bulk_update_id: Optional[int] = None
    changed_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProductSummary(BaseModel):
    id: str
    name: str
    sku: str

    class Config:
        from_attributes = True


class RecentPriceChange(PriceHistoryResponse):
    product: Optional[ProductSummary] = None


class BulkPriceUpdateResponse(BaseModel):
    id: int
    change_reason: str
    rule_id: Optional[int] = None
    adjustment_type: str
    adjustment_value: float
    apply_to: str
    target_ids: List[str] = []
    affected_count: int
    created_by: Optional[str] = None
    created_at: datetime
    is_reverted: bool
    reverted_at: Optional[datetime] = None
    reverted_by: Optional[str] = None

    class Config:
        from_attributes = True


class PriceHistoryListResponse(BaseModel):
    product_id: str
    history: List[PriceHistoryResponse]


class RecentPriceChangesResponse(BaseModel):
    recent_changes: List[RecentPriceChange]
    bulk_updates: List[BulkPriceUpdateResponse]
