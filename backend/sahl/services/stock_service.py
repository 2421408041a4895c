# Overview: Stock adjuster; the only writer of Product.stock_quantity during document flows.

from __future__ import annotations

import logging
from decimal import Decimal

from ..extensions import db
from ..models import Product
from ..money_utils import to_decimal
from ..validation import MAX_AMOUNT, ValidationError
from .concurrency import lock_for_update
from .errors import NotFoundError

logger = logging.getLogger(__name__)


def adjust_stock(product_id: int, delta: Decimal) -> Product:
    """
    Apply a signed quantity delta to a product's cached stock.

    Runs inside the caller's unit of work (flush, no commit). The row is read
    under lock_for_update and written with an optimistic version check, so two
    concurrent read-modify-write cycles cannot lose an update.
    No clamping: negative stock is valid.

    Raises:
        NotFoundError: product does not exist
        ValidationError: the new stock does not fit NUMERIC(12, 2)
    """
    delta = to_decimal(delta)
    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if product is None:
        raise NotFoundError("Product", product_id)

    new_quantity = to_decimal(product.stock_quantity) + delta
    if abs(new_quantity) > MAX_AMOUNT:
        raise ValidationError(f"Product {product_id} stock would be out of range: {new_quantity}")
    product.stock_quantity = new_quantity
    db.session.flush()

    logger.debug("stock product=%s delta=%s new=%s", product_id, delta, product.stock_quantity)
    return product
