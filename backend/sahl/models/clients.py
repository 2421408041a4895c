from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from sahl.money_utils import to_str
from sahl.time_utils import to_utc_z


class Client(db.Model):
    """
    Account holder: customer, supplier, employee or other party.

    balance is a CACHE of the document history:
        balance == opening_balance
                   + SUM(balance_sign(invoice_type) * invoice.balance)
                   + SUM(balance_sign(transaction_type) * transaction.amount)
    It is written only by balance_service.adjust_balance (document flows) and
    by reconcile_service (maintenance). Regular client edits never touch it.
    """
    __tablename__ = "clients"
    __table_args__ = (
        db.Index("ix_clients_type", "type"),
        db.Index("ix_clients_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False)  # customer, supplier, employee, other
    account_type = db.Column(db.String(16), nullable=False)  # debit, credit
    code = db.Column(db.String(64), nullable=True)
    tax_id = db.Column(db.String(64), nullable=True)

    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(128), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    mobile = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    opening_balance = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    balance = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Client id={self.id} name={self.name!r} balance={self.balance}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "account_type": self.account_type,
            "code": self.code,
            "tax_id": self.tax_id,
            "address": self.address,
            "city": self.city,
            "phone": self.phone,
            "mobile": self.mobile,
            "email": self.email,
            "notes": self.notes,
            "is_active": self.is_active,
            "opening_balance": to_str(self.opening_balance),
            "balance": to_str(self.balance),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
