import pytest

from pricing_engine.enums.pricing import AdjustmentType, RuleType
from pricing_engine.schemas.pricing_rule import PricingRuleCreate
from pricing_engine.services.pricing_service.calculate_price import (
    adjust_price,
    apply_adjustment,
    calculate_sale_price,
    compute_new_price,
    finalize_price,
    sale_discount_fields,
)


def _rule(rule_type, adjustment_type, value):
    return PricingRuleCreate(
        name="rule",
        rule_type=rule_type,
        adjustment_type=adjustment_type,
        adjustment_value=value,
    )


def test_finalize_price_rounds_half_up_to_cents():
    assert finalize_price(10.005) == 10.01
    assert finalize_price(10.004) == 10.0
    assert finalize_price(2.675) == 2.68


def test_finalize_price_never_below_one_cent():
    assert finalize_price(0) == 0.01
    assert finalize_price(-12.5) == 0.01
    assert finalize_price(0.004) == 0.01


def test_percentage_markdown_rounds_to_cents():
    rule = _rule(RuleType.markdown, AdjustmentType.percentage, 20)
    assert compute_new_price(49.99, rule) == 39.99


def test_percentage_markup():
    rule = _rule(RuleType.markup, AdjustmentType.percentage, 10)
    assert compute_new_price(100, rule) == 110.0


@pytest.mark.parametrize(
    "rule_type, value, price, expected",
    [
        (RuleType.markup, 5, 20.0, 25.0),
        (RuleType.fixed_adjustment, 2.5, 20.0, 22.5),
        (RuleType.markdown, 5, 20.0, 15.0),
        (RuleType.price_floor, 30, 20.0, 30.0),
        (RuleType.price_floor, 10, 20.0, 20.0),
        (RuleType.price_ceiling, 15, 20.0, 15.0),
        (RuleType.price_ceiling, 50, 20.0, 20.0),
    ],
)
def test_fixed_rules(rule_type, value, price, expected):
    assert compute_new_price(price, _rule(rule_type, AdjustmentType.fixed, value)) == expected


def test_fixed_markdown_below_zero_clamps_to_minimum():
    rule = _rule(RuleType.markdown, AdjustmentType.fixed, 50)
    assert compute_new_price(10, rule) == 0.01


@pytest.mark.parametrize(
    "rule_type",
    [RuleType.fixed_adjustment, RuleType.price_floor, RuleType.price_ceiling],
)
def test_percentage_with_non_percentage_rule_is_a_no_op(rule_type):
    assert adjust_price(19.999, rule_type, AdjustmentType.percentage, 50) == 20.0


def test_price_floor_is_idempotent():
    rule = _rule(RuleType.price_floor, AdjustmentType.fixed, 30)
    once = compute_new_price(12.0, rule)
    assert compute_new_price(once, rule) == once


def test_apply_adjustment_is_signed():
    assert apply_adjustment(100, AdjustmentType.percentage, -15) == 85.0
    assert apply_adjustment(100, AdjustmentType.percentage, 15) == 115.0
    assert apply_adjustment(100, AdjustmentType.fixed, -0.5) == 99.5
    assert apply_adjustment(1, AdjustmentType.fixed, -5) == 0.01


def test_calculate_sale_price():
    assert calculate_sale_price(80, sale_percentage=25) == 60.0
    assert calculate_sale_price(80, sale_amount=100) == 0.01
    assert calculate_sale_price(80, sale_amount=5.5) == 74.5
    assert calculate_sale_price(80) is None


def test_sale_discount_fields():
    assert sale_discount_fields("percentage", 30) == {"sale_percentage": 30.0, "sale_amount": None}
    assert sale_discount_fields("fixed", 5) == {"sale_percentage": None, "sale_amount": 5.0}
