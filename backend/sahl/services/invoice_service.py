# Overview: Service-layer operations for invoices and invoice items; keeps balance and stock in step.

"""
Invoice Service

Every mutation of an invoice or one of its items runs as a single ledger
operation (see ledger_service.run_ledger_operation):

- create_invoice: +balance_sign(type) * balance on the client, then each
  inline item applies stock_sign(type) * quantity.
- update_invoice: reverses the old effect and applies the new one. A client
  change moves the whole effect between clients. A type change re-signs the
  stock effect of every owned item.
- delete_invoice: reverses the balance effect, deletes each item through the
  item path (each reversing its own stock), then deletes the invoice.
- item create/update/delete: stock delta keyed on the OWNING invoice's type.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

from ..extensions import db
from ..models import Invoice, InvoiceItem, Warehouse
from ..money_utils import ZERO
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from .concurrency import lock_for_update
from .errors import NotFoundError
from .ledger_service import LedgerResult, Posting, run_ledger_operation, signed
from .signs import balance_sign, normalize_invoice_type, stock_sign


INVOICE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "invoice_number", "invoice_type", "client_id", "warehouse_id", "user_id",
        "date", "time", "payment_method",
        "total", "discount", "tax", "grand_total", "paid", "balance", "notes",
    }),
    required_on_create=frozenset({
        "invoice_number", "invoice_type", "client_id", "total", "grand_total", "balance",
    }),
    defaults=(("discount", ZERO), ("tax", ZERO), ("paid", ZERO)),
)

ITEM_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"product_id", "quantity", "unit_price", "discount", "tax", "total"}),
    required_on_create=frozenset({"product_id", "quantity", "unit_price", "total"}),
    defaults=(("discount", ZERO), ("tax", ZERO)),
)


# =============================================================================
# Validation (before any write)
# =============================================================================

def validate_invoice(data: dict | None, *, partial: bool) -> dict:
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    patch = validate_payload(model=Invoice, payload=data, policy=INVOICE_POLICY, partial=partial)
    if "invoice_type" in patch:
        patch["invoice_type"] = normalize_invoice_type(patch["invoice_type"])
    return patch


def validate_item(data: dict | None, *, partial: bool) -> dict:
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid invoice item payload")
    return validate_payload(model=InvoiceItem, payload=data, policy=ITEM_POLICY, partial=partial)


def _resolve_warehouse(patch: dict, *, creating: bool) -> None:
    warehouse_id = patch.get("warehouse_id")
    if warehouse_id is not None:
        if db.session.get(Warehouse, warehouse_id) is None:
            raise NotFoundError("Warehouse", warehouse_id)
        return
    if creating and "warehouse_id" not in patch:
        default = db.session.query(Warehouse).filter_by(is_default=True).first()
        patch["warehouse_id"] = default.id if default else None


def _lock_invoice(invoice_id: int) -> Invoice:
    invoice = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def _lock_item(item_id: int, invoice_id: int | None) -> tuple[Invoice, InvoiceItem]:
    """Lock the owning invoice, then the item (same order as delete_invoice)."""
    owner_id = db.session.query(InvoiceItem.invoice_id).filter_by(id=item_id).scalar()
    if owner_id is None or (invoice_id is not None and owner_id != invoice_id):
        raise NotFoundError("InvoiceItem", item_id)
    invoice = _lock_invoice(owner_id)
    item = lock_for_update(
        db.session.query(InvoiceItem).filter_by(id=item_id, invoice_id=owner_id)
    ).first()
    if item is None:
        raise NotFoundError("InvoiceItem", item_id)
    return invoice, item


def _invoice_effect(invoice_type: str, amount) -> Decimal:
    return signed(balance_sign(invoice_type), amount)


def _item_effect(invoice_type: str, quantity) -> Decimal:
    return signed(stock_sign(invoice_type), quantity)


# =============================================================================
# Item primitives (run inside an open ledger operation)
# =============================================================================

def _post_new_item(posting: Posting, invoice: Invoice, patch: dict) -> InvoiceItem:
    item = InvoiceItem(invoice_id=invoice.id, **patch)
    db.session.add(item)
    db.session.flush()
    posting.stock(
        item.product_id,
        _item_effect(invoice.invoice_type, item.quantity),
        reason=f"invoice {invoice.id} item {item.id} stock",
    )
    return item


def _post_item_removal(posting: Posting, invoice: Invoice, item: InvoiceItem) -> None:
    posting.stock(
        item.product_id,
        -_item_effect(invoice.invoice_type, item.quantity),
        reason=f"invoice {invoice.id} item {item.id} stock reversal",
    )
    db.session.delete(item)


# =============================================================================
# Invoices
# =============================================================================

def create_invoice(data: dict) -> LedgerResult:
    """
    Persist an invoice (optionally with inline "items") and post its effects.

    Raises:
        ValidationError: missing/malformed fields (nothing is written)
        NotFoundError: warehouse missing; client missing under the strict policy
    """
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(data or {})
    raw_items = payload.pop("items", None) or []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    patch = validate_invoice(payload, partial=False)
    item_patches = [validate_item(raw, partial=False) for raw in raw_items]

    now = utcnow()
    patch.setdefault("date", now.date())
    patch.setdefault("time", now.time().replace(microsecond=0))

    def _post(posting: Posting) -> Invoice:
        values = dict(patch)
        _resolve_warehouse(values, creating=True)

        invoice = Invoice(**values)
        db.session.add(invoice)
        db.session.flush()

        posting.balance(
            invoice.client_id,
            _invoice_effect(invoice.invoice_type, invoice.balance),
            reason=f"invoice {invoice.id} balance",
        )
        for item_patch in item_patches:
            _post_new_item(posting, invoice, item_patch)
        return invoice

    return run_ledger_operation(_post)


def update_invoice(invoice_id: int, data: dict) -> LedgerResult:
    """
    Patch an invoice: reverse the effect of the stored row, apply the patched one.

    Raises:
        ValidationError, NotFoundError
    """
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(data or {})
    if "items" in payload:
        raise ValidationError("items are changed through the invoice item operations")
    patch = validate_invoice(payload, partial=True)

    def _post(posting: Posting) -> Invoice:
        invoice = _lock_invoice(invoice_id)
        values = dict(patch)
        _resolve_warehouse(values, creating=False)

        old_type = invoice.invoice_type
        old_client_id = invoice.client_id
        old_effect = _invoice_effect(old_type, invoice.balance)

        for key, value in values.items():
            setattr(invoice, key, value)
        db.session.flush()

        new_effect = _invoice_effect(invoice.invoice_type, invoice.balance)
        reason = f"invoice {invoice.id} balance"
        if invoice.client_id == old_client_id:
            posting.balance(invoice.client_id, new_effect - old_effect, reason=reason)
        else:
            posting.balance(old_client_id, -old_effect, reason=f"{reason} reversal")
            posting.balance(invoice.client_id, new_effect, reason=reason)

        if invoice.invoice_type != old_type:
            shift = stock_sign(invoice.invoice_type) - stock_sign(old_type)
            deltas: dict[int, Decimal] = defaultdict(lambda: ZERO)
            items = db.session.query(InvoiceItem).filter_by(invoice_id=invoice.id).all()
            for item in items:
                deltas[item.product_id] += signed(shift, item.quantity)
            posting.stock_many(deltas, reason=f"invoice {invoice.id} type change {old_type}->{invoice.invoice_type}")

        return invoice

    return run_ledger_operation(_post)


def delete_invoice(invoice_id: int) -> LedgerResult:
    """
    Delete an invoice and its items, reversing every effect they posted.

    The result's document is the invoice as it was before deletion (dict).
    """
    def _post(posting: Posting) -> dict:
        invoice = _lock_invoice(invoice_id)
        snapshot = invoice.to_dict(include_items=True)

        posting.balance(
            invoice.client_id,
            -_invoice_effect(invoice.invoice_type, invoice.balance),
            reason=f"invoice {invoice.id} balance reversal",
        )

        items = (
            db.session.query(InvoiceItem)
            .filter_by(invoice_id=invoice.id)
            .order_by(InvoiceItem.id)
            .all()
        )
        for item in items:
            _post_item_removal(posting, invoice, item)
        db.session.flush()

        db.session.expire(invoice, ["items"])
        db.session.delete(invoice)
        return snapshot

    return run_ledger_operation(_post)


def get_invoice(invoice_id: int) -> Invoice:
    invoice = db.session.get(Invoice, invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def get_invoice_by_number(invoice_number: str) -> Invoice:
    invoice = db.session.query(Invoice).filter_by(invoice_number=invoice_number).order_by(Invoice.id).first()
    if invoice is None:
        raise NotFoundError("Invoice", invoice_number)
    return invoice


def list_invoices(*, invoice_type: str | None = None, client_id: int | None = None) -> list[Invoice]:
    q = db.session.query(Invoice)
    if invoice_type:
        q = q.filter(Invoice.invoice_type == normalize_invoice_type(invoice_type))
    if client_id is not None:
        q = q.filter(Invoice.client_id == client_id)
    return q.order_by(Invoice.id.asc()).all()


# =============================================================================
# Invoice items
# =============================================================================

def create_invoice_item(invoice_id: int, data: dict) -> LedgerResult:
    """Add an item to an invoice and move stock by stock_sign(invoice type) * quantity."""
    patch = validate_item(data, partial=False)

    def _post(posting: Posting) -> InvoiceItem:
        invoice = _lock_invoice(invoice_id)
        return _post_new_item(posting, invoice, patch)

    return run_ledger_operation(_post)


def update_invoice_item(item_id: int, data: dict, *, invoice_id: int | None = None) -> LedgerResult:
    """
    Patch an item. The stored (product, quantity) is reversed and the patched
    one applied; with an unchanged product the two are netted into one delta.
    Items cannot move between invoices (invoice_id is not writable).
    """
    patch = validate_item(data, partial=True)

    def _post(posting: Posting) -> InvoiceItem:
        invoice, item = _lock_item(item_id, invoice_id)

        old_product_id = item.product_id
        old_effect = _item_effect(invoice.invoice_type, item.quantity)

        for key, value in patch.items():
            setattr(item, key, value)
        db.session.flush()

        new_effect = _item_effect(invoice.invoice_type, item.quantity)
        reason = f"invoice {invoice.id} item {item.id} stock"
        if item.product_id == old_product_id:
            posting.stock(item.product_id, new_effect - old_effect, reason=reason)
        else:
            posting.stock_many(
                {old_product_id: -old_effect, item.product_id: new_effect},
                reason=reason,
            )
        return item

    return run_ledger_operation(_post)


def delete_invoice_item(item_id: int, *, invoice_id: int | None = None) -> LedgerResult:
    """Remove an item and reverse its stock effect. Document is the removed item (dict)."""
    def _post(posting: Posting) -> dict:
        invoice, item = _lock_item(item_id, invoice_id)
        snapshot = item.to_dict()
        _post_item_removal(posting, invoice, item)
        return snapshot

    return run_ledger_operation(_post)


def get_invoice_item(item_id: int, *, invoice_id: int | None = None) -> InvoiceItem:
    item = db.session.get(InvoiceItem, item_id)
    if item is None or (invoice_id is not None and item.invoice_id != invoice_id):
        raise NotFoundError("InvoiceItem", item_id)
    return item


def list_invoice_items(invoice_id: int) -> list[InvoiceItem]:
    get_invoice(invoice_id)
    return (
        db.session.query(InvoiceItem)
        .filter_by(invoice_id=invoice_id)
        .order_by(InvoiceItem.id.asc())
        .all()
    )
