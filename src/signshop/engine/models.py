"""
Data models for the costing engine and service orders.

Uses dataclasses for structured, type-safe data representation. Optional and
loosely-typed record fields are defaulted once, here, so the engine never has
to guess at shapes.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Optional
import uuid

from .numbers import to_number, to_optional_number


UNIT_LINEAR = "m"
UNIT_SQUARE = "m2"

UNIT_ALIASES = {
    "m": UNIT_LINEAR,
    "linear-meter": UNIT_LINEAR,
    "m2": UNIT_SQUARE,
    "m²": UNIT_SQUARE,
    "square-meter": UNIT_SQUARE,
}


def normalize_unit(unit: Any) -> str:
    """Map a unit label onto "m" or "m2". Anything unrecognized is square."""
    return UNIT_ALIASES.get(str(unit or "").strip().lower(), UNIT_SQUARE)


def new_id() -> str:
    return str(uuid.uuid4())


class OrderStatus(str, Enum):
    """Service order lifecycle. No transition rules are enforced."""
    QUOTE = "quote"
    APPROVED = "approved"
    PRODUCTION = "production"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for status in cls:
            if text.lower() == status.value or text in STATUS_LABELS[status].values():
                return status
        raise ValueError(f"Unknown order status '{value}'")


STATUS_LABELS = {
    OrderStatus.QUOTE: {"en": "Quote", "pt-BR": "Orçamento"},
    OrderStatus.APPROVED: {"en": "Approved", "pt-BR": "Aprovado"},
    OrderStatus.PRODUCTION: {"en": "In Production", "pt-BR": "Em produção"},
    OrderStatus.COMPLETED: {"en": "Completed", "pt-BR": "Concluído"},
}


@dataclass
class TraceStep:
    """A single step in the costing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class MaterialUsageLine:
    """Material consumed by an order, priced at the cost captured when added."""
    material_id: str
    unit: str
    cost_per_unit_snapshot: float
    length_m: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    count: Optional[float] = None
    material_name: str = ""
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.unit = normalize_unit(self.unit)

    @property
    def quantity(self) -> float:
        """Linear meters, or width × height × count for square-meter lines."""
        if self.unit == UNIT_LINEAR:
            return to_number(self.length_m)
        count = to_number(self.count, default=1.0)
        return to_number(self.width) * to_number(self.height) * count

    @classmethod
    def from_dict(cls, data: dict) -> "MaterialUsageLine":
        return cls(
            material_id=str(data.get("material_id") or ""),
            unit=data.get("unit", UNIT_SQUARE),
            cost_per_unit_snapshot=to_number(data.get("cost_per_unit_snapshot")),
            length_m=to_optional_number(data.get("length_m", data.get("meters"))),
            width=to_optional_number(data.get("width")),
            height=to_optional_number(data.get("height")),
            count=to_optional_number(data.get("count", data.get("quantity"))),
            material_name=str(data.get("material_name") or ""),
            id=str(data.get("id") or new_id()),
        )


@dataclass
class InkUsageLine:
    """Ink consumed by an order, priced at the per-liter cost captured when added."""
    ink_id: str
    ml: float
    cost_per_liter_snapshot: float
    ink_name: str = ""
    id: str = field(default_factory=new_id)

    @property
    def liters(self) -> float:
        return to_number(self.ml) / 1000

    @classmethod
    def from_dict(cls, data: dict) -> "InkUsageLine":
        return cls(
            ink_id=str(data.get("ink_id") or ""),
            ml=to_number(data.get("ml", data.get("ml_consumed"))),
            cost_per_liter_snapshot=to_number(data.get("cost_per_liter_snapshot")),
            ink_name=str(data.get("ink_name") or ""),
            id=str(data.get("id") or new_id()),
        )


@dataclass
class AdjustmentLine:
    """An extra charge or a discount; the sign is decided by which list it sits in."""
    description: str
    value: float
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, data: dict) -> "AdjustmentLine":
        return cls(
            description=str(data.get("description") or ""),
            value=to_number(data.get("value")),
            id=str(data.get("id") or new_id()),
        )


@dataclass
class Payment:
    """A payment received against an order."""
    date: str
    value: float
    method: str
    notes: Optional[str] = None
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        return cls(
            date=str(data.get("date") or ""),
            value=to_number(data.get("value")),
            method=str(data.get("method") or ""),
            notes=data.get("notes") or None,
            id=str(data.get("id") or new_id()),
        )


@dataclass
class Comment:
    author: str
    text: str
    created_at: str
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        return cls(
            author=str(data.get("author") or ""),
            text=str(data.get("text") or ""),
            created_at=str(data.get("created_at") or ""),
            id=str(data.get("id") or new_id()),
        )


@dataclass
class CostBreakdown:
    """Cost and price figures for an order, each rounded to two places."""
    material_cost: float = 0.0
    ink_cost: float = 0.0
    labor_cost: float = 0.0
    extras_total: float = 0.0
    discounts_total: float = 0.0
    total_cost: float = 0.0
    sale_price: float = 0.0
    profit: float = 0.0
    margin_percent: float = 0.0
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def figures(self) -> dict:
        """The nine monetary/percentage outputs without trace or warnings."""
        data = asdict(self)
        data.pop("warnings")
        data.pop("trace")
        return data

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CostBreakdown":
        data = data or {}
        breakdown = cls(**{
            key: to_number(data.get(key))
            for key in (
                "material_cost", "ink_cost", "labor_cost", "extras_total",
                "discounts_total", "total_cost", "sale_price", "profit",
                "margin_percent",
            )
        })
        breakdown.warnings = list(data.get("warnings") or [])
        breakdown.trace = [TraceStep(**t) for t in data.get("trace") or []]
        return breakdown


@dataclass
class ServiceOrder:
    """A customer job: material, ink and labor lines plus the stored breakdown."""
    client_id: str
    name: str
    id: str = field(default_factory=new_id)
    description: Optional[str] = None
    status: OrderStatus = OrderStatus.QUOTE
    due_date: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    material_lines: list[MaterialUsageLine] = field(default_factory=list)
    ink_lines: list[InkUsageLine] = field(default_factory=list)
    labor_hours: Optional[float] = None
    labor_rate: Optional[float] = None
    extras: list[AdjustmentLine] = field(default_factory=list)
    discounts: list[AdjustmentLine] = field(default_factory=list)
    markup_percent: Optional[float] = None
    manual_price: Optional[float] = None
    payments: list[Payment] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    breakdown: CostBreakdown = field(default_factory=CostBreakdown)

    @property
    def amount_paid(self) -> float:
        return round(sum(to_number(p.value) for p in self.payments), 2)

    @property
    def balance_due(self) -> float:
        return round(self.breakdown.sale_price - self.amount_paid, 2)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ServiceOrder":
        """Build an order from a stored record or form payload."""
        return cls(
            id=str(data.get("id") or new_id()),
            client_id=str(data.get("client_id") or ""),
            name=str(data.get("name") or ""),
            description=data.get("description") or None,
            status=OrderStatus.parse(data.get("status") or OrderStatus.QUOTE),
            due_date=data.get("due_date") or None,
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
            material_lines=[MaterialUsageLine.from_dict(d) for d in data.get("material_lines") or []],
            ink_lines=[InkUsageLine.from_dict(d) for d in data.get("ink_lines") or []],
            labor_hours=to_optional_number(data.get("labor_hours")),
            labor_rate=to_optional_number(data.get("labor_rate")),
            extras=[AdjustmentLine.from_dict(d) for d in data.get("extras") or []],
            discounts=[AdjustmentLine.from_dict(d) for d in data.get("discounts") or []],
            markup_percent=to_optional_number(data.get("markup_percent")),
            manual_price=to_optional_number(data.get("manual_price")),
            payments=[Payment.from_dict(d) for d in data.get("payments") or []],
            comments=[Comment.from_dict(d) for d in data.get("comments") or []],
            breakdown=CostBreakdown.from_dict(data.get("breakdown")),
        )
