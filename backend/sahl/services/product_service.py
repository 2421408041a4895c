# Overview: Service-layer operations for products.

"""
Product Service

Product codes are unique. stock_quantity is set once at creation (as the
opening quantity) and afterwards moves only through invoice items, or through
reconcile_service.set_product_stock as an explicit stock-count correction.
"""

from __future__ import annotations

from ..extensions import db
from ..models import InvoiceItem, Product
from ..money_utils import ZERO
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)
from .concurrency import run_with_retry
from .errors import NotFoundError

_CATALOG_FIELDS = frozenset({
    "code", "name", "description", "unit_of_measure", "category",
    "cost_price", "sell_price_1", "sell_price_2", "sell_price_3",
    "reorder_level", "is_active",
})

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=_CATALOG_FIELDS | {"opening_quantity"},
    required_on_create=frozenset({"code", "name"}),
    defaults=(("opening_quantity", ZERO),),
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(writable_fields=_CATALOG_FIELDS)


def _ensure_code_free(code: str, *, exclude_id: int | None = None) -> None:
    q = db.session.query(Product.id).filter(Product.code == code)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(f"Product code '{code}' already exists")


def create_product(data: dict) -> Product:
    """Create a product. A legacy "stock_quantity" key is read as the opening quantity."""
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(data or {})
    if "stock_quantity" in payload:
        legacy = payload.pop("stock_quantity")
        payload.setdefault("opening_quantity", legacy)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_CREATE_POLICY, partial=False)
    enforce_rules_product(patch)
    if patch.get("opening_quantity") is None:
        patch["opening_quantity"] = ZERO

    def _op():
        _ensure_code_free(patch["code"])
        product = Product(**patch)
        product.stock_quantity = patch["opening_quantity"]
        db.session.add(product)
        db.session.commit()
        return product

    return run_with_retry(_op)


def update_product(product_id: int, data: dict) -> Product:
    """Update catalog fields. stock_quantity and opening_quantity are rejected as not allowed."""
    patch = validate_payload(model=Product, payload=data, policy=PRODUCT_UPDATE_POLICY, partial=True)
    enforce_rules_product(patch)

    def _op():
        product = get_product(product_id)
        if "code" in patch:
            _ensure_code_free(patch["code"], exclude_id=product_id)
        for key, value in patch.items():
            setattr(product, key, value)
        db.session.commit()
        return product

    return run_with_retry(_op)


def delete_product(product_id: int) -> dict:
    """
    Delete a product no invoice item references.

    Raises:
        NotFoundError: unknown product
        ConflictError: invoice items still reference the product
    """
    def _op():
        product = get_product(product_id)
        used = db.session.query(InvoiceItem.id).filter_by(product_id=product_id).count()
        if used:
            raise ConflictError(f"Product {product_id} is referenced by {used} invoice item(s)")
        snapshot = product.to_dict()
        db.session.delete(product)
        db.session.commit()
        return snapshot

    return run_with_retry(_op)


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def get_product_by_code(code: str) -> Product:
    product = db.session.query(Product).filter_by(code=code).first()
    if product is None:
        raise NotFoundError("Product", code)
    return product


def list_products(*, active_only: bool = False, low_stock: bool = False) -> list[Product]:
    """
    List products.

    low_stock: only products at or below their reorder level (products
    without a reorder level never qualify).
    """
    q = db.session.query(Product)
    if active_only:
        q = q.filter(Product.is_active.is_(True))
    if low_stock:
        q = q.filter(
            Product.reorder_level.isnot(None),
            Product.stock_quantity <= Product.reorder_level,
        )
    return q.order_by(Product.id.asc()).all()
