# Overview: Service-layer operations for clients (customers, suppliers, employees).

"""
Client Service

Client edits never touch balance. The opening balance is fixed at creation;
afterwards the balance moves only through document operations, or through
reconcile_service.set_client_balance as an explicit maintenance step.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Client, Invoice, Transaction
from ..money_utils import ZERO
from ..validation import ConflictError, ModelValidationPolicy, ValidationError, validate_payload
from .concurrency import run_with_retry
from .errors import NotFoundError
from .signs import normalize_account_type, normalize_client_type

_PROFILE_FIELDS = frozenset({
    "name", "type", "account_type", "code", "tax_id", "address", "city",
    "phone", "mobile", "email", "notes", "is_active",
})

CLIENT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=_PROFILE_FIELDS | {"opening_balance"},
    required_on_create=frozenset({"name", "type", "account_type"}),
    defaults=(("opening_balance", ZERO),),
)

CLIENT_UPDATE_POLICY = ModelValidationPolicy(writable_fields=_PROFILE_FIELDS)


def _normalize(patch: dict) -> dict:
    if "type" in patch:
        patch["type"] = normalize_client_type(patch["type"])
    if "account_type" in patch:
        patch["account_type"] = normalize_account_type(patch["account_type"])
    return patch


def create_client(data: dict) -> Client:
    """
    Create a client. A legacy "balance" key is read as the opening balance.
    """
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(data or {})
    if "balance" in payload:
        legacy = payload.pop("balance")
        payload.setdefault("opening_balance", legacy)
    patch = _normalize(validate_payload(model=Client, payload=payload, policy=CLIENT_CREATE_POLICY, partial=False))
    if patch.get("opening_balance") is None:
        patch["opening_balance"] = ZERO

    def _op():
        client = Client(**patch)
        client.balance = patch["opening_balance"]
        db.session.add(client)
        db.session.commit()
        return client

    return run_with_retry(_op)


def update_client(client_id: int, data: dict) -> Client:
    """Update profile fields. balance and opening_balance are rejected as not allowed."""
    patch = _normalize(validate_payload(model=Client, payload=data, policy=CLIENT_UPDATE_POLICY, partial=True))

    def _op():
        client = get_client(client_id)
        for key, value in patch.items():
            setattr(client, key, value)
        db.session.commit()
        return client

    return run_with_retry(_op)


def delete_client(client_id: int) -> dict:
    """
    Delete a client that no document references.

    Raises:
        NotFoundError: unknown client
        ConflictError: invoices or transactions still reference the client
    """
    def _op():
        client = get_client(client_id)
        invoices = db.session.query(Invoice.id).filter_by(client_id=client_id).count()
        transactions = db.session.query(Transaction.id).filter_by(client_id=client_id).count()
        if invoices or transactions:
            raise ConflictError(
                f"Client {client_id} is referenced by {invoices} invoice(s) and {transactions} transaction(s)"
            )
        snapshot = client.to_dict()
        db.session.delete(client)
        db.session.commit()
        return snapshot

    return run_with_retry(_op)


def get_client(client_id: int) -> Client:
    client = db.session.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client", client_id)
    return client


def get_client_by_name(name: str) -> Client:
    client = db.session.query(Client).filter_by(name=name).order_by(Client.id).first()
    if client is None:
        raise NotFoundError("Client", name)
    return client


def list_clients(*, client_type: str | None = None, active_only: bool = False) -> list[Client]:
    q = db.session.query(Client)
    if client_type:
        q = q.filter(Client.type == normalize_client_type(client_type))
    if active_only:
        q = q.filter(Client.is_active.is_(True))
    return q.order_by(Client.id.asc()).all()
