from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

from pricing_engine.enums.pricing import AdjustmentType, DiscountType, RuleType

Number = Union[int, float, Decimal]

MIN_PRICE = Decimal("0.01")
_CENT = Decimal("0.01")


def _to_decimal(value: Number) -> Decimal:
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def finalize_price(raw: Number) -> float:
    """
    Round to cents (half up) and clamp to the 0.01 minimum.
    A price can never end up zero or negative.
    """
    rounded = _to_decimal(raw).quantize(_CENT, rounding=ROUND_HALF_UP)
    return float(max(MIN_PRICE, rounded))


# ===================== PRICING RULES =====================


def compute_new_price(current_price: Number, rule: Any) -> float:
    """
    Price a single product under a pricing rule.

    `rule` is anything exposing rule_type, adjustment_type and
    adjustment_value (ORM row or schema).
    """
    return adjust_price(
        current_price,
        rule_type=rule.rule_type,
        adjustment_type=rule.adjustment_type,
        adjustment_value=rule.adjustment_value or 0,
    )


def adjust_price(
    current_price: Number,
    rule_type: Union[RuleType, str],
    adjustment_type: Union[AdjustmentType, str],
    adjustment_value: Number,
) -> float:
    """
    Combinations without a defined meaning, such as price_floor under a
    percentage adjustment, leave the price unchanged apart from rounding.
    """
    current = _to_decimal(current_price)
    value = _to_decimal(adjustment_value)
    rule_type = _enum_value(rule_type)
    adjustment_type = _enum_value(adjustment_type)

    new_price = current

    if adjustment_type == AdjustmentType.percentage.value:
        if rule_type == RuleType.markup.value:
            new_price = current * (1 + value / 100)
        elif rule_type == RuleType.markdown.value:
            new_price = current * (1 - value / 100)
    else:
        if rule_type in (RuleType.markup.value, RuleType.fixed_adjustment.value):
            new_price = current + value
        elif rule_type == RuleType.markdown.value:
            new_price = current - value
        elif rule_type == RuleType.price_floor.value:
            new_price = max(current, value)
        elif rule_type == RuleType.price_ceiling.value:
            new_price = min(current, value)

    return finalize_price(new_price)


# ===================== BULK ADJUSTMENTS =====================


def apply_adjustment(
    current_price: Number,
    adjustment_type: Union[AdjustmentType, str],
    adjustment_value: Number,
) -> float:
    """
    Signed bulk adjustment:
    percentage -> price * (1 + v/100), fixed -> price + v.
    """
    current = _to_decimal(current_price)
    value = _to_decimal(adjustment_value)

    if _enum_value(adjustment_type) == AdjustmentType.percentage.value:
        new_price = current * (1 + value / 100)
    else:
        new_price = current + value

    return finalize_price(new_price)


# ===================== SALE DISPLAY PRICE =====================


def calculate_sale_price(
    price: Number,
    sale_percentage: Optional[Number] = None,
    sale_amount: Optional[Number] = None,
) -> Optional[float]:
    """
    On-sale display price, or None when the product carries no discount.
    """
    if sale_percentage is not None and sale_percentage > 0:
        return finalize_price(
            _to_decimal(price) * (1 - _to_decimal(sale_percentage) / 100)
        )
    if sale_amount is not None and sale_amount > 0:
        return finalize_price(_to_decimal(price) - _to_decimal(sale_amount))
    return None


def sale_discount_fields(discount_type: Union[DiscountType, str], discount_value: Number) -> dict:
    """Product columns a sale of the given type materialises."""
    if _enum_value(discount_type) == DiscountType.percentage.value:
        return {"sale_percentage": float(discount_value), "sale_amount": None}
    return {"sale_percentage": None, "sale_amount": float(discount_value)}
