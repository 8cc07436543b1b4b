import math

import pytest

from signshop.engine.models import (
    CostBreakdown,
    MaterialUsageLine,
    OrderStatus,
    ServiceOrder,
    normalize_unit,
)
from signshop.engine.numbers import to_number, to_optional_number


def test_status_accepts_codes_and_portuguese_labels():
    assert OrderStatus.parse("quote") is OrderStatus.QUOTE
    assert OrderStatus.parse("Orçamento") is OrderStatus.QUOTE
    assert OrderStatus.parse("Em produção") is OrderStatus.PRODUCTION
    assert OrderStatus.parse("Completed") is OrderStatus.COMPLETED


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        OrderStatus.parse("shipped")


@pytest.mark.parametrize("label, expected", [
    ("m", "m"), ("linear-meter", "m"), ("M2", "m2"), ("square-meter", "m2"), ("m²", "m2"),
])
def test_unit_aliases(label, expected):
    assert normalize_unit(label) == expected


def test_number_coercion():
    assert to_number("2.5") == 2.5
    assert to_number(None) == 0
    assert to_number(math.inf) == 0
    assert to_number(True) == 0
    assert to_number("x", default=1) == 1
    assert to_optional_number("") is None
    assert to_optional_number(math.nan) is None
    assert to_optional_number(0) == 0


def test_material_quantity_property():
    line = MaterialUsageLine(material_id="m", unit="square-meter", cost_per_unit_snapshot=1, width=2, height=1.5)
    assert line.unit == "m2"
    assert line.quantity == 3.0


def test_order_defaults_resolved_at_the_boundary():
    order = ServiceOrder.from_dict({"client_id": "c1", "name": "Placa", "labor_hours": "abc"})

    assert order.status is OrderStatus.QUOTE
    assert order.material_lines == []
    assert order.labor_hours is None
    assert order.markup_percent is None
    assert order.breakdown == CostBreakdown()


def test_order_record_keeps_snapshots_and_breakdown():
    record = {
        "client_id": "c1",
        "name": "Placa",
        "status": "Aprovado",
        "material_lines": [{"material_id": "m1", "unit": "m", "length_m": 2, "cost_per_unit_snapshot": 9.75}],
        "breakdown": {"total_cost": 19.5, "sale_price": 30, "trace": [{"step": "Total Cost", "description": "x", "value": "19.50"}]},
        "payments": [{"date": "2026-10-01", "value": 10, "method": "pix"}],
    }

    order = ServiceOrder.from_dict(record)
    again = ServiceOrder.from_dict(order.to_dict())

    assert order.status is OrderStatus.APPROVED
    assert again.to_dict()["status"] == "approved"
    assert again.material_lines[0].cost_per_unit_snapshot == 9.75
    assert again.breakdown.sale_price == 30
    assert again.breakdown.trace[0].step == "Total Cost"
    assert again.amount_paid == 10
    assert again.balance_due == 20
