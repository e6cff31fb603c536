from enum import Enum


class RuleType(str, Enum):
    markup = "markup"
    markdown = "markdown"
    fixed_adjustment = "fixed_adjustment"
    price_floor = "price_floor"
    price_ceiling = "price_ceiling"


class AdjustmentType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"


class RuleApplyTo(str, Enum):
    all = "all"
    category = "category"
    subcategory = "subcategory"
    condition = "condition"
    brand = "brand"
    price_range = "price_range"


class SaleApplyTo(str, Enum):
    all = "all"
    category = "category"
    products = "products"
    tags = "tags"


class DiscountType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"


class ChangeReason(str, Enum):
    manual = "manual"
    pricing_rule = "pricing_rule"
    bulk_update = "bulk_update"


class SaleStatus(str, Enum):
    inactive = "inactive"
    upcoming = "upcoming"
    active = "active"
    expired = "expired"
