"""
Costing engine tests.

These pin the breakdown arithmetic: computation order, snapshot pricing,
defaulting of missing figures, and decimal half-up rounding.
"""
import math

import pytest

from signshop.engine import (
    AdjustmentLine,
    InkUsageLine,
    MaterialUsageLine,
    ServiceOrder,
    compute_cost_breakdown,
    compute_order_breakdown,
)


def square(width, height, count=None, cost=10.0):
    return MaterialUsageLine(material_id="mat-1", unit="m2", cost_per_unit_snapshot=cost,
                             width=width, height=height, count=count)


def linear(length, cost):
    return MaterialUsageLine(material_id="mat-2", unit="m", cost_per_unit_snapshot=cost, length_m=length)


def test_all_zero_inputs():
    result = compute_cost_breakdown([], [])

    assert result.total_cost == 0
    assert result.sale_price == 0
    assert result.profit == 0
    assert result.margin_percent == 0
    assert result.warnings == []


def test_square_meter_line():
    result = compute_cost_breakdown([square(3, 2, 1, cost=10)], [])
    assert result.material_cost == 60.00


def test_linear_meter_line():
    result = compute_cost_breakdown([linear(5, 12.3)], [])
    assert result.material_cost == 61.50


def test_ink_line():
    ink = InkUsageLine(ink_id="ink-1", ml=150, cost_per_liter_snapshot=45)
    result = compute_cost_breakdown([], [ink])
    assert result.ink_cost == 6.75


def test_markup_pricing_rounds_half_up():
    """110.15 at 30% markup is 143.195, which must round to 143.20."""
    result = compute_cost_breakdown([], [], extras=[AdjustmentLine("Setup", 110.15)], markup_percent=30)

    assert result.total_cost == 110.15
    assert result.sale_price == 143.20
    assert result.profit == 33.05
    assert result.margin_percent == 23.08


def test_manual_price_overrides_markup():
    result = compute_cost_breakdown([square(3, 2, 1)], [], markup_percent=30, manual_price=100)

    assert result.total_cost == 60.00
    assert result.sale_price == 100
    assert result.profit == 40.00
    assert result.margin_percent == 40.00
    assert "Manual price override" in result.get_trace_text()


def test_manual_price_zero_is_an_explicit_price():
    result = compute_cost_breakdown([square(3, 2, 1)], [], markup_percent=50, manual_price=0)

    assert result.sale_price == 0
    assert result.profit == -60.00
    assert result.margin_percent == 0


def test_non_finite_manual_price_falls_through_to_markup():
    result = compute_cost_breakdown([square(3, 2, 1)], [], markup_percent=50, manual_price=math.nan)
    assert result.sale_price == 90.00


def test_no_markup_sells_at_cost():
    result = compute_cost_breakdown([linear(2, 7.5)], [])

    assert result.sale_price == result.total_cost == 15.00
    assert result.profit == 0
    assert result.margin_percent == 0


def test_full_order_computation_order():
    result = compute_cost_breakdown(
        [square(1.2, 0.8, 3, cost=18.5)],
        [InkUsageLine(ink_id="ink-1", ml=75, cost_per_liter_snapshot=180)],
        labor_hours=1.5,
        labor_rate=40,
        extras=[AdjustmentLine("Installation", 20)],
        discounts=[AdjustmentLine("Loyalty", 5)],
        markup_percent=40,
    )

    assert result.material_cost == 53.28
    assert result.ink_cost == 13.50
    assert result.labor_cost == 60.00
    assert result.extras_total == 20.00
    assert result.discounts_total == 5.00
    assert result.total_cost == 141.78
    assert result.sale_price == 198.49
    assert result.profit == 56.71
    assert result.margin_percent == 28.57


def test_count_defaults_to_one_when_missing_or_non_finite():
    missing = compute_cost_breakdown([square(2, 2, None)], [])
    nan = compute_cost_breakdown([square(2, 2, math.nan)], [])
    zero = compute_cost_breakdown([square(2, 2, 0)], [])

    assert missing.material_cost == 40.00
    assert nan.material_cost == 40.00
    assert zero.material_cost == 0


def test_missing_and_malformed_numbers_count_as_zero():
    result = compute_cost_breakdown(
        [
            MaterialUsageLine(material_id="m", unit="m", cost_per_unit_snapshot=10, length_m=None),
            MaterialUsageLine(material_id="m", unit="m2", cost_per_unit_snapshot=math.inf, width=1, height=1),
        ],
        [InkUsageLine(ink_id="i", ml="lots", cost_per_liter_snapshot=100)],
        labor_hours=math.nan,
        labor_rate=50,
        extras=[{"value": None}, {"value": "abc"}],
    )

    assert result.figures() == {
        "material_cost": 0, "ink_cost": 0, "labor_cost": 0, "extras_total": 0,
        "discounts_total": 0, "total_cost": 0, "sale_price": 0, "profit": 0,
        "margin_percent": 0,
    }


def test_mapping_lines_are_accepted():
    result = compute_cost_breakdown(
        [{"material_id": "m", "unit": "linear-meter", "meters": 4, "cost_per_unit_snapshot": 2.5},
         {"material_id": "m", "unit": "square-meter", "width": 1, "height": 0.5, "cost_per_unit_snapshot": 30}],
        [{"ink_id": "i", "ml_consumed": 200, "cost_per_liter_snapshot": 50}],
        extras=[{"description": "Rush", "value": 5}],
        discounts=[{"description": "Promo", "value": 2}],
    )

    assert result.material_cost == 25.00
    assert result.ink_cost == 10.00
    assert result.total_cost == 38.00


def test_rounding_is_decimal_not_binary():
    # round(1.005, 2) and round(2.675, 2) give 1.0 and 2.67 with binary floats
    result = compute_cost_breakdown([], [], extras=[AdjustmentLine("a", 1.005)], discounts=[AdjustmentLine("b", 2.675)])

    assert result.extras_total == 1.01
    assert result.discounts_total == 2.68


def test_negative_values_round_away_from_zero():
    result = compute_cost_breakdown([], [], discounts=[AdjustmentLine("Credit", 0.125)])
    assert result.total_cost == -0.13


def test_discounts_larger_than_cost_are_not_floored():
    result = compute_cost_breakdown([square(1, 1, 1, cost=10)], [], discounts=[AdjustmentLine("Goodwill", 25)], markup_percent=20)

    assert result.total_cost == -15.00
    assert result.sale_price == -18.00
    assert result.margin_percent == 0
    assert any("Discounts exceed" in w for w in result.warnings)


def test_identical_inputs_give_identical_output():
    args = ([square(1.3, 0.7, 2, cost=21.9)], [InkUsageLine(ink_id="i", ml=33, cost_per_liter_snapshot=199)])
    kwargs = dict(labor_hours=0.75, labor_rate=45, markup_percent=35)

    first = compute_cost_breakdown(*args, **kwargs)
    second = compute_cost_breakdown(*args, **kwargs)

    assert first == second
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize("extra", [0.5, 1, 10, 250])
def test_raising_extras_raises_cost_and_markup_price(extra):
    lines = [square(2, 1, 1, cost=15)]
    base = compute_cost_breakdown(lines, [], extras=[AdjustmentLine("x", 5)], markup_percent=25)
    more = compute_cost_breakdown(lines, [], extras=[AdjustmentLine("x", 5 + extra)], markup_percent=25)

    assert more.total_cost > base.total_cost
    assert more.sale_price > base.sale_price


def test_order_breakdown_uses_snapshot_lines():
    order = ServiceOrder(
        client_id="c1",
        name="Banner",
        material_lines=[square(3, 1, 1, cost=18.5)],
        ink_lines=[InkUsageLine(ink_id="i", ml=120, cost_per_liter_snapshot=180)],
        labor_hours=1.5,
        labor_rate=40,
        markup_percent=40,
    )

    result = compute_order_breakdown(order)

    assert result.total_cost == 137.10
    assert result.sale_price == 191.94


def test_very_large_figures_do_not_raise():
    result = compute_cost_breakdown([], [], labor_hours=1e20, labor_rate=1e10, markup_percent=10)

    assert result.labor_cost == 1e30
    assert result.total_cost == 1e30
    assert result.sale_price == 1.1e30
    assert result.margin_percent == 9.09
