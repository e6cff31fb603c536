import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
)
from sqlalchemy.orm import relationship

from pricing_engine.database.connection import Base
from pricing_engine.enums.product import ProductStatus


def _generate_product_id() -> str:
    return uuid.uuid4().hex


class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True, index=True, default=_generate_product_id)
    sku = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)

    price = Column(Float, nullable=False)
    compare_at_price = Column(Float, nullable=True)  # struck-through "was" price

    is_on_sale = Column(Boolean, nullable=False, default=False)
    sale_percentage = Column(Float, nullable=True)
    sale_amount = Column(Float, nullable=True)  # fixed-discount sales
    sale_ends_at = Column(DateTime, nullable=True)
    active_sale_id = Column(
        Integer, ForeignKey("sales.id", ondelete="SET NULL"), nullable=True, index=True
    )

    status = Column(String, nullable=False, default=ProductStatus.ACTIVE.value, index=True)
    category_id = Column(String, nullable=True, index=True)
    subcategory_id = Column(String, nullable=True, index=True)
    condition = Column(String, nullable=True)
    brand = Column(String, nullable=True)
    tags = Column(JSON, default=list)

    # bumped on every engine price write; used for compare-and-swap updates
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    price_history = relationship(
        "PriceHistory",
        back_populates="product",
        cascade="all, delete-orphan",
    )
