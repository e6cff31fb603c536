from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String

from pricing_engine.database.connection import Base


class PricingConfig(Base):
    __tablename__ = "pricing_config"

    id = Column(Integer, primary_key=True, index=True)
    default_markup_percent = Column(Float, nullable=False, default=30.0)
    minimum_margin = Column(Float, nullable=False, default=10.0)
    rounding_rule = Column(String, nullable=False, default="nearest_99")

    # floor prices per item condition
    min_price_new_with_tags = Column(Float, nullable=False, default=15.0)
    min_price_new_without_tags = Column(Float, nullable=False, default=12.0)
    min_price_like_new = Column(Float, nullable=False, default=10.0)
    min_price_good = Column(Float, nullable=False, default=8.0)
    min_price_fair = Column(Float, nullable=False, default=5.0)
    min_price_poor = Column(Float, nullable=False, default=3.0)

    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
