from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from pricing_engine.database.connection import Base


class PriceHistory(Base):
    """Append-only ledger row; one per price change."""

    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        String, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    previous_price = Column(Float, nullable=False)
    new_price = Column(Float, nullable=False)
    change_reason = Column(String, nullable=False, index=True)  # manual / pricing_rule / bulk_update
    rule_id = Column(Integer, nullable=True, index=True)
    bulk_update_id = Column(
        Integer, ForeignKey("bulk_price_updates.id"), nullable=True, index=True
    )
    changed_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    product = relationship("Product", back_populates="price_history")
