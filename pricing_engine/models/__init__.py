# Import every model so Base.metadata knows all tables before create_all.
from pricing_engine.models.sale import Sale  # noqa: F401
from pricing_engine.models.product import Product  # noqa: F401
from pricing_engine.models.bulk_price_update import BulkPriceUpdate  # noqa: F401
from pricing_engine.models.price_history import PriceHistory  # noqa: F401
from pricing_engine.models.pricing_rule import PricingRule  # noqa: F401
from pricing_engine.models.pricing_config import PricingConfig  # noqa: F401
