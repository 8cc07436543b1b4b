"""Engine subpackage - order costing and pricing."""
from .costing_engine import compute_cost_breakdown, compute_order_breakdown, resolve_sale_price
from .models import (
    AdjustmentLine,
    CostBreakdown,
    InkUsageLine,
    MaterialUsageLine,
    OrderStatus,
    ServiceOrder,
)

__all__ = [
    'compute_cost_breakdown', 'compute_order_breakdown', 'resolve_sale_price',
    'AdjustmentLine', 'CostBreakdown', 'InkUsageLine', 'MaterialUsageLine',
    'OrderStatus', 'ServiceOrder',
]
