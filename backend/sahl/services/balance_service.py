# Overview: Balance adjuster; the only writer of Client.balance during document flows.

from __future__ import annotations

import logging
from decimal import Decimal

from ..extensions import db
from ..models import Client
from ..money_utils import to_decimal
from ..validation import MAX_AMOUNT, ValidationError
from .concurrency import lock_for_update
from .errors import NotFoundError

logger = logging.getLogger(__name__)


def adjust_balance(client_id: int, delta: Decimal) -> Client:
    """
    Apply a signed amount delta to a client's cached balance.

    Same contract as stock_service.adjust_stock: locked read, versioned write,
    flush only. The caller commits or rolls back the whole document operation.

    Raises:
        NotFoundError: client does not exist
        ValidationError: the new balance does not fit NUMERIC(12, 2)
    """
    delta = to_decimal(delta)
    client = lock_for_update(db.session.query(Client).filter_by(id=client_id)).first()
    if client is None:
        raise NotFoundError("Client", client_id)

    new_balance = to_decimal(client.balance) + delta
    if abs(new_balance) > MAX_AMOUNT:
        raise ValidationError(f"Client {client_id} balance would be out of range: {new_balance}")
    client.balance = new_balance
    db.session.flush()

    logger.debug("balance client=%s delta=%s new=%s", client_id, delta, client.balance)
    return client
