"""
Catalog Service - CRUD for clients, materials and inks.

Materials and inks are the master data that order lines snapshot their
costs from. Changing a master cost here never touches existing orders.
"""
import logging
import math
import re
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Optional
import uuid

from ..engine.models import InkUsageLine, MaterialUsageLine, UNIT_ALIASES, UNIT_LINEAR, UNIT_SQUARE, normalize_unit
from ..engine.numbers import to_number, to_optional_number
from .audit_service import AuditService
from .plans import require_capacity
from .store import JsonStore, Page

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _now() -> str:
    return datetime.now().isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_cost(value):
    """Numbers come back as floats; anything else is kept for validation to reject."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


def _parse_unit(value) -> str:
    unit = str(value or UNIT_LINEAR).strip()
    return UNIT_ALIASES.get(unit.lower(), unit)


@dataclass
class Client:
    """A customer of the shop."""
    name: str
    document: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: str = field(default_factory=_now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, row: dict) -> 'Client':
        return cls(
            name=str(row.get('name') or ''),
            document=row.get('document') or None,
            contact=row.get('contact') or None,
            email=row.get('email') or None,
            phone=row.get('phone') or None,
            address=row.get('address') or None,
            notes=row.get('notes') or None,
            created_at=row.get('created_at') or _now(),
            id=row.get('id') or _new_id(),
        )


@dataclass
class Material:
    """A substrate sold by the linear meter ("m") or square meter ("m2")."""
    name: str
    unit: str = UNIT_LINEAR
    cost_per_unit: float = 0.0
    supplier: Optional[str] = None
    stock: Optional[float] = None
    created_at: str = field(default_factory=_now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, row: dict) -> 'Material':
        return cls(
            name=str(row.get('name') or ''),
            unit=_parse_unit(row.get('unit')),
            cost_per_unit=_parse_cost(row.get('cost_per_unit', 0.0)),
            supplier=row.get('supplier') or None,
            stock=to_optional_number(row.get('stock')),
            created_at=row.get('created_at') or _now(),
            id=row.get('id') or _new_id(),
        )


@dataclass
class Ink:
    """An ink priced per liter."""
    name: str
    cost_per_liter: float = 0.0
    supplier: Optional[str] = None
    stock_ml: Optional[float] = None
    created_at: str = field(default_factory=_now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, row: dict) -> 'Ink':
        return cls(
            name=str(row.get('name') or ''),
            cost_per_liter=_parse_cost(row.get('cost_per_liter', 0.0)),
            supplier=row.get('supplier') or None,
            stock_ml=to_optional_number(row.get('stock_ml')),
            created_at=row.get('created_at') or _now(),
            id=row.get('id') or _new_id(),
        )


@dataclass
class ValidationResult:
    """Result of form validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: str):
        self.errors.append(error)
        self.valid = False


def _check_cost(result: ValidationResult, value, label: str):
    try:
        number = float(value)
    except (TypeError, ValueError):
        result.add_error(f"{label} must be a number")
        return
    if not math.isfinite(number):
        result.add_error(f"{label} must be a finite number")
        return
    if number < 0:
        result.add_error(f"{label} must not be negative")


class CatalogService:
    """Service for managing clients, materials and inks."""

    def __init__(self, store: JsonStore, audit: AuditService, plan: str = "free"):
        self.store = store
        self.audit = audit
        self.plan = plan

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_client(self, client: Client) -> ValidationResult:
        result = ValidationResult(valid=True)
        if not client.name.strip():
            result.add_error("Name is required")
        if client.email and not EMAIL_RE.match(client.email):
            result.add_error("Invalid email")
        duplicate = self.store.find(
            'clients',
            lambda r: r.get('id') != client.id and str(r.get('name', '')).strip().lower() == client.name.strip().lower()
        )
        if client.name.strip() and duplicate:
            result.warnings.append(f"Another client is already named '{client.name}'")
        return result

    def validate_material(self, material: Material) -> ValidationResult:
        result = ValidationResult(valid=True)
        if not material.name.strip():
            result.add_error("Name is required")
        if material.unit not in (UNIT_LINEAR, UNIT_SQUARE):
            result.add_error("Unit must be 'm' or 'm2'")
        _check_cost(result, material.cost_per_unit, "Cost per unit")
        if material.stock is not None and material.stock < 0:
            result.warnings.append("Stock is negative")
        return result

    def validate_ink(self, ink: Ink) -> ValidationResult:
        result = ValidationResult(valid=True)
        if not ink.name.strip():
            result.add_error("Name is required")
        _check_cost(result, ink.cost_per_liter, "Cost per liter")
        if ink.stock_ml is not None and ink.stock_ml < 0:
            result.warnings.append("Stock is negative")
        return result

    # ------------------------------------------------------------------
    # Shared CRUD plumbing
    # ------------------------------------------------------------------

    def _create(self, collection: str, entity: str, record, validation: ValidationResult):
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))
        require_capacity(self.store, collection, self.plan)
        row = self.store.add(collection, asdict(record))
        self.audit.record(entity, row['id'], 'create', None, row)
        logger.info("Created %s %s", entity, row['id'])
        return row

    def _update(self, collection: str, entity: str, row_id: str, changes: dict, factory, validate):
        before = self.store.find_by_id(collection, row_id)
        if before is None:
            raise ValueError(f"{entity.capitalize()} '{row_id}' not found")
        record = factory({**before, **changes, 'id': row_id})
        validation = validate(record)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))
        row = self.store.update(collection, row_id, asdict(record))
        self.audit.record(entity, row_id, 'update', before, row)
        logger.info("Updated %s %s", entity, row_id)
        return row

    def _delete(self, collection: str, entity: str, row_id: str) -> bool:
        before = self.store.find_by_id(collection, row_id)
        if before is None:
            raise ValueError(f"{entity.capitalize()} '{row_id}' not found")
        self.store.remove(collection, row_id)
        self.audit.record(entity, row_id, 'delete', before, None)
        logger.info("Deleted %s %s", entity, row_id)
        return True

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def list_clients(self, page: int = 1, limit: int = 10, search: str = "") -> Page:
        return self.store.paginate('clients', page=page, limit=limit, search=search)

    def get_client(self, client_id: str) -> Optional[Client]:
        row = self.store.find_by_id('clients', client_id)
        return Client.from_dict(row) if row else None

    def create_client(self, data: dict) -> Client:
        client = Client.from_dict({k: v for k, v in data.items() if k not in ('id', 'created_at')})
        row = self._create('clients', 'client', client, self.validate_client(client))
        return Client.from_dict(row)

    def update_client(self, client_id: str, changes: dict) -> Client:
        row = self._update('clients', 'client', client_id, changes, Client.from_dict, self.validate_client)
        return Client.from_dict(row)

    def delete_client(self, client_id: str) -> bool:
        return self._delete('clients', 'client', client_id)

    # ------------------------------------------------------------------
    # Materials
    # ------------------------------------------------------------------

    def list_materials(self, page: int = 1, limit: int = 10, search: str = "") -> Page:
        return self.store.paginate('materials', page=page, limit=limit, search=search)

    def get_material(self, material_id: str) -> Optional[Material]:
        row = self.store.find_by_id('materials', material_id)
        return Material.from_dict(row) if row else None

    def create_material(self, data: dict) -> Material:
        material = Material.from_dict({k: v for k, v in data.items() if k not in ('id', 'created_at')})
        row = self._create('materials', 'material', material, self.validate_material(material))
        return Material.from_dict(row)

    def update_material(self, material_id: str, changes: dict) -> Material:
        row = self._update('materials', 'material', material_id, changes, Material.from_dict, self.validate_material)
        return Material.from_dict(row)

    def delete_material(self, material_id: str) -> bool:
        return self._delete('materials', 'material', material_id)

    # ------------------------------------------------------------------
    # Inks
    # ------------------------------------------------------------------

    def list_inks(self, page: int = 1, limit: int = 10, search: str = "") -> Page:
        return self.store.paginate('inks', page=page, limit=limit, search=search)

    def get_ink(self, ink_id: str) -> Optional[Ink]:
        row = self.store.find_by_id('inks', ink_id)
        return Ink.from_dict(row) if row else None

    def create_ink(self, data: dict) -> Ink:
        ink = Ink.from_dict({k: v for k, v in data.items() if k not in ('id', 'created_at')})
        row = self._create('inks', 'ink', ink, self.validate_ink(ink))
        return Ink.from_dict(row)

    def update_ink(self, ink_id: str, changes: dict) -> Ink:
        row = self._update('inks', 'ink', ink_id, changes, Ink.from_dict, self.validate_ink)
        return Ink.from_dict(row)

    def delete_ink(self, ink_id: str) -> bool:
        return self._delete('inks', 'ink', ink_id)

    # ------------------------------------------------------------------
    # Snapshot lines
    # ------------------------------------------------------------------

    def material_line(
        self,
        material_id: str,
        length_m: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        count: Optional[float] = None,
    ) -> MaterialUsageLine:
        """Build an order line carrying the material's current cost as its snapshot."""
        material = self.get_material(material_id)
        if material is None:
            raise ValueError(f"Material '{material_id}' not found")
        return MaterialUsageLine(
            material_id=material.id,
            unit=normalize_unit(material.unit),
            cost_per_unit_snapshot=to_number(material.cost_per_unit),
            length_m=length_m,
            width=width,
            height=height,
            count=count,
            material_name=material.name,
        )

    def ink_line(self, ink_id: str, ml: float) -> InkUsageLine:
        """Build an order line carrying the ink's current per-liter cost as its snapshot."""
        ink = self.get_ink(ink_id)
        if ink is None:
            raise ValueError(f"Ink '{ink_id}' not found")
        return InkUsageLine(
            ink_id=ink.id,
            ml=to_number(ml),
            cost_per_liter_snapshot=to_number(ink.cost_per_liter),
            ink_name=ink.name,
        )
