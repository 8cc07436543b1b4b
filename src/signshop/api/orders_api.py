"""
Orders API - FastAPI router for service orders and cost previews.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from ..engine.costing_engine import compute_cost_breakdown
from ..engine.models import ServiceOrder
from ..state import AppState
from .common import call_service, found, page_response
from .state import get_state

router = APIRouter(prefix="/api/orders", tags=["orders"])


# Pydantic models for API
class MaterialLineIn(BaseModel):
    """A material usage line with its snapshot cost."""
    id: Optional[str] = None
    material_id: str
    material_name: str = ""
    unit: Literal["m", "m2", "linear-meter", "square-meter"]
    length_m: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    count: Optional[float] = None
    cost_per_unit_snapshot: float = Field(ge=0)


class InkLineIn(BaseModel):
    """An ink usage line with its snapshot cost per liter."""
    id: Optional[str] = None
    ink_id: str
    ink_name: str = ""
    ml: float = Field(ge=0)
    cost_per_liter_snapshot: float = Field(ge=0)


class AdjustmentIn(BaseModel):
    id: Optional[str] = None
    description: str = ""
    value: float


class PaymentIn(BaseModel):
    value: float
    method: str
    date: Optional[str] = None
    notes: Optional[str] = None


class CommentIn(BaseModel):
    author: str
    text: str = Field(min_length=1)


class StatusIn(BaseModel):
    status: str


class CalcRequest(BaseModel):
    """Raw costing inputs, no stored order needed."""
    material_lines: list[MaterialLineIn] = []
    ink_lines: list[InkLineIn] = []
    labor_hours: Optional[float] = Field(default=None, ge=0)
    labor_rate: Optional[float] = Field(default=None, ge=0)
    extras: list[AdjustmentIn] = []
    discounts: list[AdjustmentIn] = []
    markup_percent: Optional[float] = Field(default=None, ge=0)
    manual_price: Optional[float] = Field(default=None, ge=0)


class OrderCreate(CalcRequest):
    """Request model for creating a service order."""
    client_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: str = "quote"
    due_date: Optional[str] = None


class OrderUpdate(BaseModel):
    """Request model for updating a service order."""
    client_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None
    material_lines: Optional[list[MaterialLineIn]] = None
    ink_lines: Optional[list[InkLineIn]] = None
    labor_hours: Optional[float] = Field(default=None, ge=0)
    labor_rate: Optional[float] = Field(default=None, ge=0)
    extras: Optional[list[AdjustmentIn]] = None
    discounts: Optional[list[AdjustmentIn]] = None
    markup_percent: Optional[float] = Field(default=None, ge=0)
    manual_price: Optional[float] = Field(default=None, ge=0)


class MaterialLineRequest(BaseModel):
    material_id: str
    length_m: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    count: Optional[float] = None


class InkLineRequest(BaseModel):
    ink_id: str
    ml: float = Field(ge=0)


def order_response(order: ServiceOrder) -> dict:
    data = order.to_dict()
    data["amount_paid"] = order.amount_paid
    data["balance_due"] = order.balance_due
    return jsonable_encoder(data)


def calculate(req: CalcRequest) -> dict:
    """Breakdown for posted lines."""
    breakdown = compute_cost_breakdown(
        [line.model_dump() for line in req.material_lines],
        [line.model_dump() for line in req.ink_lines],
        labor_hours=req.labor_hours,
        labor_rate=req.labor_rate,
        extras=[e.model_dump() for e in req.extras],
        discounts=[d.model_dump() for d in req.discounts],
        markup_percent=req.markup_percent,
        manual_price=req.manual_price,
    )
    return jsonable_encoder(breakdown.to_dict())


# Endpoints

@router.get("")
async def list_orders(
    page: int = 1,
    limit: int = 10,
    search: str = "",
    status: Optional[str] = None,
    state: AppState = Depends(get_state),
):
    """List service orders, newest first."""
    result = call_service(state.orders.list_orders, page, limit, search, status)
    return page_response(result, order_response)


@router.post("/preview")
async def preview_order(req: CalcRequest):
    """Compute a breakdown for an unsaved order."""
    return calculate(req)


@router.post("/lines/material")
async def snapshot_material_line(req: MaterialLineRequest, state: AppState = Depends(get_state)):
    """Build a material line with the material's current cost captured."""
    line = call_service(
        state.catalog.material_line,
        req.material_id, req.length_m, req.width, req.height, req.count,
    )
    return jsonable_encoder(line)


@router.post("/lines/ink")
async def snapshot_ink_line(req: InkLineRequest, state: AppState = Depends(get_state)):
    """Build an ink line with the ink's current cost per liter captured."""
    return jsonable_encoder(call_service(state.catalog.ink_line, req.ink_id, req.ml))


@router.get("/{order_id}")
async def get_order(order_id: str, state: AppState = Depends(get_state)):
    order = state.orders.get_order(order_id)
    found(order, "Service order", order_id)
    return order_response(order)


@router.post("", status_code=201)
async def create_order(data: OrderCreate, state: AppState = Depends(get_state)):
    """Create a service order and store its computed breakdown."""
    return order_response(call_service(state.orders.create_order, data.model_dump()))


@router.put("/{order_id}")
async def update_order(order_id: str, updates: OrderUpdate, state: AppState = Depends(get_state)):
    """Update fields provided in the request body and recompute the breakdown."""
    changes = updates.model_dump(exclude_unset=True)
    return order_response(call_service(state.orders.update_order, order_id, changes))


@router.put("/{order_id}/status")
async def set_status(order_id: str, req: StatusIn, state: AppState = Depends(get_state)):
    return order_response(call_service(state.orders.set_status, order_id, req.status))


@router.post("/{order_id}/payments")
async def add_payment(order_id: str, req: PaymentIn, state: AppState = Depends(get_state)):
    return order_response(call_service(
        state.orders.add_payment, order_id, req.value, req.method, req.date, req.notes
    ))


@router.post("/{order_id}/comments")
async def add_comment(order_id: str, req: CommentIn, state: AppState = Depends(get_state)):
    return order_response(call_service(state.orders.add_comment, order_id, req.author, req.text))


@router.delete("/{order_id}")
async def delete_order(order_id: str, state: AppState = Depends(get_state)):
    call_service(state.orders.delete_order, order_id)
    return {"success": True, "message": f"Service order '{order_id}' deleted"}
