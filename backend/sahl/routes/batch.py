# Overview: Flask API routes for batch create/update/delete/recode.

"""
Batch Routes

POST /api/batch/<entity>/<action> where entity is invoices, transactions,
clients or products.

Bodies:
- create:  {"rows": [{...}, ...]}
- update:  {"rows": [{"id": 1, ...}, ...]}
- delete:  {"ids": [1, 2, ...]}
- recode:  {"field": "notes", "value": "...", "ids": [1, 2, ...]}

A batch stops at the first failing record. Records before it stay
committed and are reported in "completed_ids".
"""

from flask import Blueprint, current_app, request

from ..services import batch_service
from ..services.errors import BatchOperationError, NotFoundError, PersistenceError
from ..validation import ConflictError, ValidationError

batch_bp = Blueprint("batch", __name__, url_prefix="/api/batch")


def _status_for(exc: Exception) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    return 500


@batch_bp.post("/<entity>/<action>")
def run_batch_route(entity: str, action: str):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        if action == "create":
            result = batch_service.batch_create(entity, data.get("rows"))
        elif action == "update":
            result = batch_service.batch_update(entity, data.get("rows"))
        elif action == "delete":
            result = batch_service.batch_delete(entity, data.get("ids"))
        elif action == "recode":
            field_name = data.get("field")
            if not field_name or "value" not in data:
                return {"error": "field and value are required"}, 400
            result = batch_service.batch_recode(entity, field_name, data["value"], data.get("ids"))
        else:
            return {"error": f"Unknown batch action: {action}"}, 404
        return {"batch": result.to_dict(), "warnings": result.warnings}
    except ValidationError as e:
        return {"error": str(e)}, 400
    except BatchOperationError as e:
        return {
            "error": str(e.cause),
            "index": e.index,
            "completed_ids": e.completed_ids,
        }, _status_for(e.cause)
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to run batch %s %s", entity, action)
        return {"error": "Failed to run batch"}, 500
