import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, String

from pricing_engine.database.connection import Base


class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    rule_type = Column(String, nullable=False)  # markup, markdown, fixed_adjustment, price_floor, price_ceiling
    adjustment_type = Column(String, nullable=False)  # percentage, fixed
    adjustment_value = Column(Float, nullable=False)
    apply_to = Column(String, nullable=False, default="all")
    category_ids = Column(JSON, default=list)
    subcategory_ids = Column(JSON, default=list)
    conditions = Column(JSON, default=list)
    brands = Column(JSON, default=list)
    min_price = Column(Float, nullable=True)
    max_price = Column(Float, nullable=True)
    priority = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
