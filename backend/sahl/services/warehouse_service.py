# Overview: Service-layer operations for warehouses.

from __future__ import annotations

from ..extensions import db
from ..models import Invoice, Warehouse
from ..validation import ConflictError, ModelValidationPolicy, validate_payload
from .concurrency import run_with_retry
from .errors import NotFoundError

WAREHOUSE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "address", "is_default", "is_active"}),
    required_on_create=frozenset({"name"}),
)


def _clear_default(except_id: int | None = None) -> None:
    q = db.session.query(Warehouse).filter(Warehouse.is_default.is_(True))
    if except_id is not None:
        q = q.filter(Warehouse.id != except_id)
    for other in q.all():
        other.is_default = False


def create_warehouse(data: dict) -> Warehouse:
    """Create a warehouse; if it is the default, the previous default is cleared."""
    patch = validate_payload(model=Warehouse, payload=data, policy=WAREHOUSE_POLICY, partial=False)

    def _op():
        if patch.get("is_default"):
            _clear_default()
        warehouse = Warehouse(**patch)
        db.session.add(warehouse)
        db.session.commit()
        return warehouse

    return run_with_retry(_op)


def update_warehouse(warehouse_id: int, data: dict) -> Warehouse:
    patch = validate_payload(model=Warehouse, payload=data, policy=WAREHOUSE_POLICY, partial=True)

    def _op():
        warehouse = get_warehouse(warehouse_id)
        if patch.get("is_default"):
            _clear_default(except_id=warehouse_id)
        for key, value in patch.items():
            setattr(warehouse, key, value)
        db.session.commit()
        return warehouse

    return run_with_retry(_op)


def delete_warehouse(warehouse_id: int) -> None:
    """
    Raises:
        NotFoundError: unknown warehouse
        ConflictError: the default warehouse, or one referenced by invoices
    """
    def _op():
        warehouse = get_warehouse(warehouse_id)
        if warehouse.is_default:
            raise ConflictError("The default warehouse cannot be deleted")
        if db.session.query(Invoice.id).filter_by(warehouse_id=warehouse_id).first() is not None:
            raise ConflictError(f"Warehouse {warehouse_id} is referenced by invoices")
        db.session.delete(warehouse)
        db.session.commit()

    run_with_retry(_op)


def get_warehouse(warehouse_id: int) -> Warehouse:
    warehouse = db.session.get(Warehouse, warehouse_id)
    if warehouse is None:
        raise NotFoundError("Warehouse", warehouse_id)
    return warehouse


def get_default_warehouse() -> Warehouse:
    warehouse = db.session.query(Warehouse).filter_by(is_default=True).first()
    if warehouse is None:
        raise NotFoundError("Warehouse", "default")
    return warehouse


def list_warehouses() -> list[Warehouse]:
    return db.session.query(Warehouse).order_by(Warehouse.id.asc()).all()


def ensure_default_warehouse(name: str = "المخزن الرئيسي") -> Warehouse:
    """Idempotent bootstrap: make sure one default warehouse exists."""
    existing = db.session.query(Warehouse).filter_by(is_default=True).first()
    if existing:
        return existing
    warehouse = Warehouse(name=name, address="المقر الرئيسي", is_default=True, is_active=True)
    db.session.add(warehouse)
    db.session.commit()
    return warehouse
