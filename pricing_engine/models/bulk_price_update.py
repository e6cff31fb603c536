from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, String

from pricing_engine.database.connection import Base


class BulkPriceUpdate(Base):
    """Descriptor of one batch price mutation; revertible at most once."""

    __tablename__ = "bulk_price_updates"

    id = Column(Integer, primary_key=True, index=True)
    change_reason = Column(String, nullable=False, default="bulk_update")
    rule_id = Column(Integer, nullable=True, index=True)
    adjustment_type = Column(String, nullable=False)
    adjustment_value = Column(Float, nullable=False)
    apply_to = Column(String, nullable=False, default="all")
    target_ids = Column(JSON, default=list)
    selector = Column(JSON, default=dict)
    affected_count = Column(Integer, nullable=False, default=0)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    is_reverted = Column(Boolean, nullable=False, default=False)
    reverted_at = Column(DateTime, nullable=True)
    reverted_by = Column(String, nullable=True)
