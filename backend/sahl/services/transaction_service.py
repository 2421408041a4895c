# Overview: Service-layer operations for cash transactions (receipts and payments).

"""
Transaction Service

Receipts lower the client balance, payments raise it (signs.balance_sign).
Create, update and delete each run as one ledger operation, mirroring the
invoice pattern: updates reverse the stored (type, client, amount) and apply
the patched one.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Transaction
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from .concurrency import lock_for_update
from .errors import NotFoundError
from .ledger_service import LedgerResult, Posting, run_ledger_operation, signed
from .signs import balance_sign, normalize_transaction_type


TRANSACTION_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "transaction_number", "transaction_type", "client_id", "user_id",
        "date", "time", "amount", "payment_method", "bank", "reference", "notes",
    }),
    required_on_create=frozenset({"transaction_number", "transaction_type", "client_id", "amount"}),
)


def validate_transaction(data: dict | None, *, partial: bool) -> dict:
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    patch = validate_payload(model=Transaction, payload=data, policy=TRANSACTION_POLICY, partial=partial)
    if "transaction_type" in patch:
        patch["transaction_type"] = normalize_transaction_type(patch["transaction_type"])
    return patch


def _lock_transaction(transaction_id: int) -> Transaction:
    tx = lock_for_update(db.session.query(Transaction).filter_by(id=transaction_id)).first()
    if tx is None:
        raise NotFoundError("Transaction", transaction_id)
    return tx


def _effect(tx: Transaction):
    return signed(balance_sign(tx.transaction_type), tx.amount)


def create_transaction(data: dict) -> LedgerResult:
    """
    Persist a receipt/payment and move the client balance by sign * amount.

    Raises:
        ValidationError: missing/malformed fields (nothing is written)
        NotFoundError: client missing under the strict policy
    """
    patch = validate_transaction(data, partial=False)
    now = utcnow()
    patch.setdefault("date", now.date())
    patch.setdefault("time", now.time().replace(microsecond=0))

    def _post(posting: Posting) -> Transaction:
        tx = Transaction(**patch)
        db.session.add(tx)
        db.session.flush()
        posting.balance(tx.client_id, _effect(tx), reason=f"transaction {tx.id} amount")
        return tx

    return run_ledger_operation(_post)


def update_transaction(transaction_id: int, data: dict) -> LedgerResult:
    patch = validate_transaction(data, partial=True)

    def _post(posting: Posting) -> Transaction:
        tx = _lock_transaction(transaction_id)
        old_client_id = tx.client_id
        old_effect = _effect(tx)

        for key, value in patch.items():
            setattr(tx, key, value)
        db.session.flush()

        new_effect = _effect(tx)
        reason = f"transaction {tx.id} amount"
        if tx.client_id == old_client_id:
            posting.balance(tx.client_id, new_effect - old_effect, reason=reason)
        else:
            posting.balance(old_client_id, -old_effect, reason=f"{reason} reversal")
            posting.balance(tx.client_id, new_effect, reason=reason)
        return tx

    return run_ledger_operation(_post)


def delete_transaction(transaction_id: int) -> LedgerResult:
    """Delete a transaction and reverse its balance effect. Document is the removed row (dict)."""
    def _post(posting: Posting) -> dict:
        tx = _lock_transaction(transaction_id)
        snapshot = tx.to_dict()
        posting.balance(tx.client_id, -_effect(tx), reason=f"transaction {tx.id} amount reversal")
        db.session.delete(tx)
        return snapshot

    return run_ledger_operation(_post)


def get_transaction(transaction_id: int) -> Transaction:
    tx = db.session.get(Transaction, transaction_id)
    if tx is None:
        raise NotFoundError("Transaction", transaction_id)
    return tx


def get_transaction_by_number(transaction_number: str) -> Transaction:
    tx = (
        db.session.query(Transaction)
        .filter_by(transaction_number=transaction_number)
        .order_by(Transaction.id)
        .first()
    )
    if tx is None:
        raise NotFoundError("Transaction", transaction_number)
    return tx


def list_transactions(*, transaction_type: str | None = None, client_id: int | None = None) -> list[Transaction]:
    q = db.session.query(Transaction)
    if transaction_type:
        q = q.filter(Transaction.transaction_type == normalize_transaction_type(transaction_type))
    if client_id is not None:
        q = q.filter(Transaction.client_id == client_id)
    return q.order_by(Transaction.id.asc()).all()
