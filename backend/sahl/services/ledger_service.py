# Overview: Unit-of-work runner for document operations; routes every aggregate delta to the adjusters.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

from flask import current_app

from ..extensions import db
from ..money_utils import ZERO, to_decimal
from .balance_service import adjust_balance
from .concurrency import begin_write, run_with_retry
from .errors import NotFoundError
from .stock_service import adjust_stock
"""
SAHL Ledger Invariants (authoritative)

- Client.balance and Product.stock_quantity are caches of the document history
  (see models.clients.Client and models.inventory.Product for the formulas).
- Only document operations (invoice_service, transaction_service) move them,
  and only through a Posting handed out by run_ledger_operation().
- One document operation == one database transaction: the document write and
  all of its adjustments commit together or roll back together.
- Updates reverse the effect of the row as it was read at the start of the
  operation, then apply the effect of the new row.
- A dangling client/product id on an adjustment follows the configured
  missing-reference policy (WARN skips and reports, STRICT aborts).
"""

logger = logging.getLogger(__name__)

WARN = "warn"
STRICT = "strict"
POLICIES = (WARN, STRICT)


@dataclass
class LedgerResult:
    """Outcome of one document operation: the document and any skipped-adjustment warnings."""
    document: Any
    warnings: list[str] = field(default_factory=list)

    def to_dict(self, key: str) -> dict:
        document = self.document.to_dict() if hasattr(self.document, "to_dict") else self.document
        return {key: document, "warnings": list(self.warnings)}


class Posting:
    """Adjustments requested by a single document operation."""

    def __init__(self, policy: str):
        self.policy = policy
        self.warnings: list[str] = []

    def balance(self, client_id: int, delta: Decimal, *, reason: str) -> None:
        delta = to_decimal(delta)
        if delta == ZERO:
            return
        try:
            adjust_balance(client_id, delta)
        except NotFoundError as exc:
            self._missing(exc, reason, delta)

    def stock(self, product_id: int, delta: Decimal, *, reason: str) -> None:
        delta = to_decimal(delta)
        if delta == ZERO:
            return
        try:
            adjust_stock(product_id, delta)
        except NotFoundError as exc:
            self._missing(exc, reason, delta)

    def stock_many(self, deltas: dict[int, Decimal], *, reason: str) -> None:
        """Apply per-product deltas in id order so concurrent writers lock rows in the same order."""
        for product_id in sorted(deltas):
            self.stock(product_id, deltas[product_id], reason=reason)

    def _missing(self, exc: NotFoundError, reason: str, delta: Decimal) -> None:
        if self.policy == STRICT:
            raise exc
        message = f"{exc}: {reason} of {delta} was not applied"
        logger.warning(message)
        self.warnings.append(message)


def current_policy() -> str:
    policy = str(current_app.config.get("LEDGER_MISSING_REFERENCE_POLICY", WARN)).strip().lower()
    if policy not in POLICIES:
        raise ValueError(f"LEDGER_MISSING_REFERENCE_POLICY must be one of {POLICIES}, got {policy!r}")
    return policy


def run_ledger_operation(func: Callable[[Posting], Any]) -> LedgerResult:
    """
    Run func(posting) as one unit of work and commit it.

    func loads the prior state, writes the document and requests adjustments
    on the posting. On retry (lock conflict) the whole function runs again with
    a fresh Posting against freshly read rows, so no delta is applied twice.
    """
    policy = current_policy()

    def _op():
        begin_write()
        posting = Posting(policy)
        document = func(posting)
        db.session.commit()
        return LedgerResult(document=document, warnings=posting.warnings)

    return run_with_retry(_op)


def signed(sign: int, value) -> Decimal:
    """sign * value as a two-place Decimal; None counts as zero."""
    if value is None:
        return ZERO
    return to_decimal(sign * to_decimal(value))
