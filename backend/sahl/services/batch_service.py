# Overview: Batch create/update/delete/recode as loops over the single-record operations.

"""
Batch operations

Each record goes through its single-record operation and commits on its own,
so every ledger invariant holds per record. A batch is NOT atomic: it stops
at the first failing record and raises BatchOperationError listing the ids
already committed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from ..validation import ModelValidationPolicy, ValidationError
from . import client_service, invoice_service, product_service, transaction_service
from .errors import BatchOperationError
from .ledger_service import LedgerResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _EntityOps:
    create: Callable[[dict], Any]
    update: Callable[[int, dict], Any]
    delete: Callable[[int], Any]
    update_policy: ModelValidationPolicy


ENTITIES: dict[str, _EntityOps] = {
    "invoices": _EntityOps(
        invoice_service.create_invoice,
        invoice_service.update_invoice,
        invoice_service.delete_invoice,
        invoice_service.INVOICE_POLICY,
    ),
    "transactions": _EntityOps(
        transaction_service.create_transaction,
        transaction_service.update_transaction,
        transaction_service.delete_transaction,
        transaction_service.TRANSACTION_POLICY,
    ),
    "clients": _EntityOps(
        client_service.create_client,
        client_service.update_client,
        client_service.delete_client,
        client_service.CLIENT_UPDATE_POLICY,
    ),
    "products": _EntityOps(
        product_service.create_product,
        product_service.update_product,
        product_service.delete_product,
        product_service.PRODUCT_UPDATE_POLICY,
    ),
}


@dataclass
class BatchResult:
    ids: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"ids": list(self.ids), "count": len(self.ids), "warnings": list(self.warnings)}


def _ops(entity: str) -> _EntityOps:
    try:
        return ENTITIES[entity]
    except KeyError:
        raise ValidationError(f"Unknown batch entity: {entity}")


def _record(result: BatchResult, outcome: Any, fallback_id: int | None = None) -> None:
    if isinstance(outcome, LedgerResult):
        result.warnings.extend(outcome.warnings)
        outcome = outcome.document
    if isinstance(outcome, dict):
        record_id = outcome.get("id", fallback_id)
    elif outcome is None:
        record_id = fallback_id
    else:
        record_id = outcome.id
    result.ids.append(record_id)


def _run(entity: str, action: str, calls: list[tuple[int | None, Callable[[], Any]]]) -> BatchResult:
    result = BatchResult()
    for index, (record_id, call) in enumerate(calls):
        try:
            outcome = call()
        except Exception as exc:
            logger.warning(
                "Batch %s %s stopped at record %d after %d committed: %s",
                entity, action, index, len(result.ids), exc,
            )
            raise BatchOperationError(index, list(result.ids), exc) from exc
        _record(result, outcome, record_id)
    logger.info("Batch %s %s committed %d record(s)", entity, action, len(result.ids))
    return result


def _require_list(value, label: str) -> list:
    if not isinstance(value, list):
        raise ValidationError(f"{label} must be a list")
    return value


def _require_id(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer id")
    return value


def batch_create(entity: str, rows: list[dict]) -> BatchResult:
    ops = _ops(entity)
    rows = _require_list(rows, "rows")
    return _run(entity, "create", [(None, lambda row=row: ops.create(row)) for row in rows])


def batch_update(entity: str, rows: list[dict]) -> BatchResult:
    """Each row carries its "id" plus the fields to patch."""
    ops = _ops(entity)
    calls = []
    for row in _require_list(rows, "rows"):
        if not isinstance(row, dict):
            raise ValidationError("each row must be an object")
        patch = dict(row)
        record_id = _require_id(patch.pop("id", None), "id")
        calls.append((record_id, lambda record_id=record_id, patch=patch: ops.update(record_id, patch)))
    return _run(entity, "update", calls)


def batch_delete(entity: str, ids: list[int]) -> BatchResult:
    ops = _ops(entity)
    calls = []
    for raw in _require_list(ids, "ids"):
        record_id = _require_id(raw, "id")
        calls.append((record_id, lambda record_id=record_id: ops.delete(record_id)))
    return _run(entity, "delete", calls)


def batch_recode(entity: str, field_name: str, value, ids: list[int]) -> BatchResult:
    """
    Overwrite one field across records. Only fields the single-record update
    accepts can be recoded, so ledger fields (balance, client_id, ...) go
    through the reverse-then-apply path like any other update.
    """
    ops = _ops(entity)
    if field_name not in ops.update_policy.writable_fields:
        raise ValidationError(f"Field cannot be recoded: {field_name}")
    calls = []
    for raw in _require_list(ids, "ids"):
        record_id = _require_id(raw, "id")
        calls.append((record_id, lambda record_id=record_id: ops.update(record_id, {field_name: value})))
    return _run(entity, "recode", calls)
