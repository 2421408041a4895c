from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from sahl.money_utils import to_str
from sahl.time_utils import to_utc_z


class Invoice(db.Model):
    """
    Sale, purchase, sale-return or purchase-return document.

    balance is the amount fed to the client ledger (signed by invoice_type).
    Items are owned: they are removed with the invoice, each reversing its
    own stock effect first (see invoice_service.delete_invoice).

    invoice_number is human-facing and intentionally not unique.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.Index("ix_invoices_client", "client_id"),
        db.Index("ix_invoices_type", "invoice_type"),
        db.Index("ix_invoices_number", "invoice_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(64), nullable=False)
    invoice_type = db.Column(db.String(24), nullable=False)  # sale, purchase, sale_return, purchase_return

    # Plain integer references: a dangling client id is a ledger policy
    # decision (warn or strict), not a storage-level constraint.
    client_id = db.Column(db.Integer, nullable=False)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=True)
    user_id = db.Column(db.Integer, nullable=True)

    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.Time, nullable=False)
    payment_method = db.Column(db.String(32), nullable=True)

    total = db.Column(db.Numeric(12, 2), nullable=False)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    tax = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    grand_total = db.Column(db.Numeric(12, 2), nullable=False)
    paid = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    balance = db.Column(db.Numeric(12, 2), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship(
        "InvoiceItem",
        backref=db.backref("invoice", lazy=True),
        cascade="all, delete-orphan",
        lazy=True,
        order_by="InvoiceItem.id",
    )
    warehouse = db.relationship("Warehouse", lazy=True)

    def __repr__(self) -> str:
        return f"<Invoice id={self.id} number={self.invoice_number!r} type={self.invoice_type} balance={self.balance}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "invoice_type": self.invoice_type,
            "client_id": self.client_id,
            "warehouse_id": self.warehouse_id,
            "user_id": self.user_id,
            "date": self.date.isoformat() if self.date else None,
            "time": self.time.strftime("%H:%M:%S") if self.time else None,
            "payment_method": self.payment_method,
            "total": to_str(self.total),
            "discount": to_str(self.discount),
            "tax": to_str(self.tax),
            "grand_total": to_str(self.grand_total),
            "paid": to_str(self.paid),
            "balance": to_str(self.balance),
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class InvoiceItem(db.Model):
    """Invoice line. Its stock sign comes from the OWNING invoice's type."""
    __tablename__ = "invoice_items"
    __table_args__ = (
        db.Index("ix_invoice_items_product", "product_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False)

    quantity = db.Column(db.Numeric(12, 2), nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    tax = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total = db.Column(db.Numeric(12, 2), nullable=False)

    def __repr__(self) -> str:
        return f"<InvoiceItem id={self.id} invoice_id={self.invoice_id} product_id={self.product_id} qty={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "product_id": self.product_id,
            "quantity": to_str(self.quantity),
            "unit_price": to_str(self.unit_price),
            "discount": to_str(self.discount),
            "tax": to_str(self.tax),
            "total": to_str(self.total),
        }
