from __future__ import annotations

from ..extensions import db
from sahl.money_utils import to_str
from sahl.time_utils import to_utc_z


class Transaction(db.Model):
    """
    Cash movement with a client.

    TRANSACTION TYPES:
    - receipt (قبض): money received from the client, balance goes down
    - payment (صرف): money paid to the client, balance goes up
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_client", "client_id"),
        db.Index("ix_transactions_type", "transaction_type"),
        db.Index("ix_transactions_number", "transaction_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_number = db.Column(db.String(64), nullable=False)
    transaction_type = db.Column(db.String(16), nullable=False)
    client_id = db.Column(db.Integer, nullable=False)
    user_id = db.Column(db.Integer, nullable=True)

    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.Time, nullable=False)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(32), nullable=True)
    bank = db.Column(db.String(128), nullable=True)
    reference = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} number={self.transaction_number!r} type={self.transaction_type} amount={self.amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_number": self.transaction_number,
            "transaction_type": self.transaction_type,
            "client_id": self.client_id,
            "user_id": self.user_id,
            "date": self.date.isoformat() if self.date else None,
            "time": self.time.strftime("%H:%M:%S") if self.time else None,
            "amount": to_str(self.amount),
            "payment_method": self.payment_method,
            "bank": self.bank,
            "reference": self.reference,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
