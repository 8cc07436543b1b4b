"""
Order Service - service order lifecycle over the store.

Every create and edit recomputes the cost breakdown from the lines stored on
the order and saves it with the record. Reads return the stored breakdown as
is, so later changes to material or ink master costs never reprice history.
"""
import logging
from datetime import datetime
from typing import Optional

from ..engine.costing_engine import compute_order_breakdown
from ..engine.models import Comment, CostBreakdown, OrderStatus, Payment, ServiceOrder
from ..engine.numbers import to_number
from .audit_service import AuditService
from .catalog_service import ValidationResult
from .plans import require_capacity
from .store import JsonStore, Page

logger = logging.getLogger(__name__)

COLLECTION = 'service_orders'
READ_ONLY_FIELDS = ('id', 'created_at', 'updated_at', 'breakdown')


class OrderService:
    """Service for managing service orders."""

    def __init__(self, store: JsonStore, audit: AuditService, plan: str = "free"):
        self.store = store
        self.audit = audit
        self.plan = plan

    def validate_order(self, order: ServiceOrder) -> ValidationResult:
        """Check the fields a service order form requires."""
        result = ValidationResult(valid=True)

        if not order.client_id:
            result.add_error("Client is required")
        elif self.store.find_by_id('clients', order.client_id) is None:
            result.add_error(f"Client '{order.client_id}' not found")

        if not order.name.strip():
            result.add_error("Service name is required")

        for line in order.material_lines:
            if line.cost_per_unit_snapshot < 0:
                result.add_error(f"Negative snapshot cost on material line {line.id}")
        for line in order.ink_lines:
            if line.cost_per_liter_snapshot < 0:
                result.add_error(f"Negative snapshot cost on ink line {line.id}")
            if line.ml < 0:
                result.add_error(f"Negative volume on ink line {line.id}")

        for value, label in (
            (order.labor_hours, "Labor hours"),
            (order.labor_rate, "Labor rate"),
            (order.markup_percent, "Markup"),
            (order.manual_price, "Manual price"),
        ):
            if value is not None and value < 0:
                result.add_error(f"{label} must not be negative")

        return result

    def preview(self, data: dict) -> CostBreakdown:
        """Breakdown for unsaved form data."""
        return compute_order_breakdown(ServiceOrder.from_dict(data))

    def create_order(self, data: dict) -> ServiceOrder:
        """Create an order from form data; status starts as a quote unless given."""
        payload = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS}
        order = ServiceOrder.from_dict(payload)

        validation = self.validate_order(order)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))
        require_capacity(self.store, COLLECTION, self.plan)

        now = datetime.now().isoformat()
        order.created_at = now
        order.updated_at = now
        order.breakdown = compute_order_breakdown(order)

        row = self.store.add(COLLECTION, order.to_dict())
        self.audit.record('service_order', order.id, 'create', None, row)
        logger.info("Created service order %s (%s) at %.2f", order.id, order.name, order.breakdown.sale_price)
        return order

    def get_order(self, order_id: str) -> Optional[ServiceOrder]:
        row = self.store.find_by_id(COLLECTION, order_id)
        return ServiceOrder.from_dict(row) if row else None

    def _require(self, order_id: str) -> tuple[dict, ServiceOrder]:
        row = self.store.find_by_id(COLLECTION, order_id)
        if row is None:
            raise ValueError(f"Service order '{order_id}' not found")
        return row, ServiceOrder.from_dict(row)

    def _save(self, order: ServiceOrder, before: dict, action: str) -> ServiceOrder:
        order.updated_at = datetime.now().isoformat()
        row = self.store.update(COLLECTION, order.id, order.to_dict())
        self.audit.record('service_order', order.id, action, before, row)
        return order

    def update_order(self, order_id: str, changes: dict) -> ServiceOrder:
        """Apply changes and recompute the breakdown from the order's own snapshot lines."""
        before, _ = self._require(order_id)
        payload = {k: v for k, v in changes.items() if k not in READ_ONLY_FIELDS}
        order = ServiceOrder.from_dict({**before, **payload})

        validation = self.validate_order(order)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        order.breakdown = compute_order_breakdown(order)
        self._save(order, before, 'update')
        logger.info("Updated service order %s", order_id)
        return order

    def set_status(self, order_id: str, status) -> ServiceOrder:
        """Move an order to any status; the lifecycle is not enforced."""
        before, order = self._require(order_id)
        order.status = OrderStatus.parse(status)
        self._save(order, before, 'status')
        logger.info("Service order %s status -> %s", order_id, order.status.value)
        return order

    def add_payment(
        self,
        order_id: str,
        value: float,
        method: str,
        date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ServiceOrder:
        before, order = self._require(order_id)
        order.payments.append(Payment(
            date=date or datetime.now().date().isoformat(),
            value=to_number(value),
            method=method,
            notes=notes,
        ))
        return self._save(order, before, 'update')

    def add_comment(self, order_id: str, author: str, text: str) -> ServiceOrder:
        if not text or not text.strip():
            raise ValueError("Comment text is required")
        before, order = self._require(order_id)
        order.comments.append(Comment(author=author, text=text, created_at=datetime.now().isoformat()))
        return self._save(order, before, 'update')

    def delete_order(self, order_id: str) -> bool:
        before, _ = self._require(order_id)
        self.store.remove(COLLECTION, order_id)
        self.audit.record('service_order', order_id, 'delete', before, None)
        logger.info("Deleted service order %s", order_id)
        return True

    def list_orders(self, page: int = 1, limit: int = 10, search: str = "", status: Optional[str] = None) -> Page:
        """Paginated orders; `data` holds ServiceOrder objects."""
        filters = {'status': OrderStatus.parse(status).value} if status else None
        result = self.store.paginate(COLLECTION, page=page, limit=limit, search=search, filters=filters)
        result.data = [ServiceOrder.from_dict(row) for row in result.data]
        return result

    def all_orders(self) -> list[ServiceOrder]:
        return [ServiceOrder.from_dict(row) for row in self.store.all(COLLECTION)]
