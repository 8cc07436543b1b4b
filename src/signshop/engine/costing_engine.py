"""
Costing Engine - turns an order's lines into a cost and price breakdown.

The engine is a pure function of its inputs:
- Material and ink lines are priced at their snapshot costs only
- Missing, non-numeric or non-finite figures count as zero
- Arithmetic runs in Decimal; only the outputs are rounded (half up, 0.01)
- Nothing here raises for bad numbers or touches storage
"""
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from .models import (
    AdjustmentLine,
    CostBreakdown,
    InkUsageLine,
    MaterialUsageLine,
    ServiceOrder,
    UNIT_LINEAR,
)
from .numbers import ZERO, round_money, to_decimal, to_optional_number

HUNDRED = Decimal('100')
THOUSAND = Decimal('1000')

MaterialInput = Union[MaterialUsageLine, Mapping]
InkInput = Union[InkUsageLine, Mapping]
AdjustmentInput = Union[AdjustmentLine, Mapping]


def _as_material(line: MaterialInput) -> MaterialUsageLine:
    return line if isinstance(line, MaterialUsageLine) else MaterialUsageLine.from_dict(line)


def _as_ink(line: InkInput) -> InkUsageLine:
    return line if isinstance(line, InkUsageLine) else InkUsageLine.from_dict(line)


def _as_adjustment(line: AdjustmentInput) -> AdjustmentLine:
    return line if isinstance(line, AdjustmentLine) else AdjustmentLine.from_dict(line)


def material_line_cost(line: MaterialUsageLine) -> Decimal:
    """Snapshot cost per unit times the unit-dependent quantity."""
    if line.unit == UNIT_LINEAR:
        quantity = to_decimal(line.length_m)
    else:
        quantity = to_decimal(line.width) * to_decimal(line.height) * to_decimal(line.count, default=1.0)
    return to_decimal(line.cost_per_unit_snapshot) * quantity


def ink_line_cost(line: InkUsageLine) -> Decimal:
    """Snapshot cost per liter times the milliliters consumed, in liters."""
    return to_decimal(line.cost_per_liter_snapshot) * (to_decimal(line.ml) / THOUSAND)


def resolve_sale_price(
    total_cost: Decimal,
    markup_percent: Optional[float] = None,
    manual_price: Optional[float] = None,
) -> tuple[Decimal, str]:
    """
    Derive the sale price from total cost.

    A manual price wins whenever one is given, zero included. Otherwise the
    markup is applied; with neither, the job is sold at cost.

    Returns (sale_price, method).
    """
    manual = to_optional_number(manual_price)
    if manual is not None:
        return to_decimal(manual), "manual"

    markup = to_optional_number(markup_percent)
    if markup is not None:
        return total_cost * (1 + to_decimal(markup) / HUNDRED), "markup"

    return total_cost, "cost"


def compute_cost_breakdown(
    material_lines: Iterable[MaterialInput],
    ink_lines: Iterable[InkInput],
    labor_hours: Optional[float] = None,
    labor_rate: Optional[float] = None,
    extras: Optional[Iterable[AdjustmentInput]] = None,
    discounts: Optional[Iterable[AdjustmentInput]] = None,
    markup_percent: Optional[float] = None,
    manual_price: Optional[float] = None,
) -> CostBreakdown:
    """
    Compute the cost breakdown for an order.

    Args:
        material_lines: Material usage lines (models or mappings)
        ink_lines: Ink usage lines (models or mappings)
        labor_hours: Hours of labor, default 0
        labor_rate: Cost per labor hour, default 0
        extras: Adjustments added to cost
        discounts: Adjustments subtracted from cost
        markup_percent: Markup applied to total cost when no manual price
        manual_price: Sale price override

    Returns:
        CostBreakdown with two-decimal figures and a computation trace
    """
    materials = [_as_material(line) for line in material_lines or []]
    inks = [_as_ink(line) for line in ink_lines or []]
    extra_lines = [_as_adjustment(line) for line in extras or []]
    discount_lines = [_as_adjustment(line) for line in discounts or []]

    material_cost = sum((material_line_cost(line) for line in materials), ZERO)
    ink_cost = sum((ink_line_cost(line) for line in inks), ZERO)
    labor_cost = to_decimal(labor_hours) * to_decimal(labor_rate)
    extras_total = sum((to_decimal(line.value) for line in extra_lines), ZERO)
    discounts_total = sum((to_decimal(line.value) for line in discount_lines), ZERO)

    total_cost = material_cost + ink_cost + labor_cost + extras_total - discounts_total

    sale_price, method = resolve_sale_price(total_cost, markup_percent, manual_price)
    profit = sale_price - total_cost
    margin_percent = (profit / sale_price) * HUNDRED if sale_price > 0 else ZERO

    breakdown = CostBreakdown(
        material_cost=round_money(material_cost),
        ink_cost=round_money(ink_cost),
        labor_cost=round_money(labor_cost),
        extras_total=round_money(extras_total),
        discounts_total=round_money(discounts_total),
        total_cost=round_money(total_cost),
        sale_price=round_money(sale_price),
        profit=round_money(profit),
        margin_percent=round_money(margin_percent),
    )

    breakdown.add_trace("Materials", f"{len(materials)} line(s) at snapshot cost", f"{breakdown.material_cost:.2f}")
    breakdown.add_trace("Inks", f"{len(inks)} line(s) at snapshot cost per liter", f"{breakdown.ink_cost:.2f}")
    breakdown.add_trace("Labor", "Hours × rate", f"{breakdown.labor_cost:.2f}")
    breakdown.add_trace("Adjustments", f"+{breakdown.extras_total:.2f} extras / -{breakdown.discounts_total:.2f} discounts")
    breakdown.add_trace("Total Cost", "Materials + inks + labor + extras - discounts", f"{breakdown.total_cost:.2f}")
    if method == "manual":
        breakdown.add_trace("Sale Price", "Manual price override", f"{breakdown.sale_price:.2f}")
    elif method == "markup":
        breakdown.add_trace("Sale Price", f"Total cost + {to_optional_number(markup_percent):g}% markup", f"{breakdown.sale_price:.2f}")
    else:
        breakdown.add_trace("Sale Price", "No markup or manual price, selling at cost", f"{breakdown.sale_price:.2f}")
    breakdown.add_trace("Margin", "Profit / sale price", f"{breakdown.margin_percent:.2f}%")

    if discounts_total > material_cost + ink_cost + labor_cost + extras_total:
        breakdown.add_warning("Discounts exceed gross cost; total cost is negative")

    return breakdown


def compute_order_breakdown(order: ServiceOrder) -> CostBreakdown:
    """Compute the breakdown from the lines stored on an order."""
    return compute_cost_breakdown(
        order.material_lines,
        order.ink_lines,
        labor_hours=order.labor_hours,
        labor_rate=order.labor_rate,
        extras=order.extras,
        discounts=order.discounts,
        markup_percent=order.markup_percent,
        manual_price=order.manual_price,
    )
