# Overview: Error kinds raised by the ledger services.

from __future__ import annotations


class NotFoundError(LookupError):
    """A document, client or product id does not resolve (404)."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(RuntimeError):
    """The store rejected a write; the unit of work was rolled back (500)."""


class BatchOperationError(Exception):
    """
    A batch stopped at the record at `index`.

    Records before it are committed (batches are not atomic); `completed_ids`
    lists them. `cause` is the error raised by the single-record operation.
    """

    def __init__(self, index: int, completed_ids: list[int], cause: Exception):
        super().__init__(f"Batch stopped at record {index}: {cause}")
        self.index = index
        self.completed_ids = completed_ids
        self.cause = cause
