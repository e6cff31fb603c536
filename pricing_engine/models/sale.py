from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, String

from pricing_engine.database.connection import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    discount_type = Column(String, nullable=False)  # percentage / fixed
    discount_value = Column(Float, nullable=False)
    apply_to = Column(String, nullable=False, default="all")  # all / category / products / tags
    category_ids = Column(JSON, default=list)
    product_ids = Column(JSON, default=list)
    tags = Column(JSON, default=list)
    starts_at = Column(DateTime, nullable=False, index=True)
    ends_at = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    show_countdown = Column(Boolean, nullable=False, default=False)
    banner_text = Column(String, nullable=True)
    banner_color = Column(String, nullable=True, default="#FF5733")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
