from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from sahl.money_utils import to_str
from sahl.time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data.

    stock_quantity is a CACHE of the invoice-item history:
        stock_quantity == opening_quantity
                          + SUM(stock_sign(owning invoice type) * item.quantity)
    Negative stock is allowed (oversell is a business concern, not a storage error).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_products_code"),
        db.Index("ix_products_name", "name"),
        db.Index("ix_products_active", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    unit_of_measure = db.Column(db.String(32), nullable=False, default="unit")
    category = db.Column(db.String(128), nullable=True)

    cost_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    sell_price_1 = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    sell_price_2 = db.Column(db.Numeric(12, 2), nullable=True)
    sell_price_3 = db.Column(db.Numeric(12, 2), nullable=True)

    opening_quantity = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    stock_quantity = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    reorder_level = db.Column(db.Numeric(12, 2), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} code={self.code!r} stock={self.stock_quantity}>"

    @property
    def is_low_stock(self) -> bool:
        return self.reorder_level is not None and self.stock_quantity <= self.reorder_level

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "unit_of_measure": self.unit_of_measure,
            "category": self.category,
            "cost_price": to_str(self.cost_price),
            "sell_price_1": to_str(self.sell_price_1),
            "sell_price_2": to_str(self.sell_price_2),
            "sell_price_3": to_str(self.sell_price_3),
            "opening_quantity": to_str(self.opening_quantity),
            "stock_quantity": to_str(self.stock_quantity),
            "reorder_level": to_str(self.reorder_level),
            "is_low_stock": self.is_low_stock,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class Warehouse(db.Model):
    """Storage location an invoice draws from or delivers to. At most one is the default."""
    __tablename__ = "warehouses"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "is_default": self.is_default,
            "is_active": self.is_active,
        }
