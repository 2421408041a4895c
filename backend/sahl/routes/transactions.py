# Overview: Flask API routes for cash transactions (receipts and payments).

from flask import Blueprint, current_app, request

from ..services import transaction_service
from ..services.errors import NotFoundError, PersistenceError
from ..validation import ValidationError

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
def list_transactions_route():
    try:
        transactions = transaction_service.list_transactions(
            transaction_type=request.args.get("type"),
            client_id=request.args.get("client_id", type=int),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"items": [t.to_dict() for t in transactions], "count": len(transactions)}


@transactions_bp.get("/<int:transaction_id>")
def get_transaction_route(transaction_id: int):
    try:
        return {"transaction": transaction_service.get_transaction(transaction_id).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@transactions_bp.get("/by-number/<transaction_number>")
def get_transaction_by_number_route(transaction_number: str):
    try:
        return {"transaction": transaction_service.get_transaction_by_number(transaction_number).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@transactions_bp.post("")
def create_transaction_route():
    try:
        result = transaction_service.create_transaction(request.get_json(silent=True))
        return result.to_dict("transaction"), 201
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to create transaction")
        return {"error": "Failed to create transaction"}, 500


@transactions_bp.route("/<int:transaction_id>", methods=["PUT", "PATCH"])
def update_transaction_route(transaction_id: int):
    try:
        result = transaction_service.update_transaction(transaction_id, request.get_json(silent=True))
        return result.to_dict("transaction")
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update transaction")
        return {"error": "Failed to update transaction"}, 500


@transactions_bp.delete("/<int:transaction_id>")
def delete_transaction_route(transaction_id: int):
    try:
        return transaction_service.delete_transaction(transaction_id).to_dict("transaction")
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to delete transaction")
        return {"error": "Failed to delete transaction"}, 500
