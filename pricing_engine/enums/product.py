from enum import Enum


class ProductStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DRAFT = "DRAFT"
    SOLD = "SOLD"
    ARCHIVED = "ARCHIVED"
    RESERVED = "RESERVED"


class ItemCondition(str, Enum):
    NEW_WITH_TAGS = "NEW_WITH_TAGS"
    NEW_WITHOUT_TAGS = "NEW_WITHOUT_TAGS"
    LIKE_NEW = "LIKE_NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
