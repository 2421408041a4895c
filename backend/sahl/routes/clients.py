# Overview: Flask API routes for client master data; parses input and returns JSON responses.

"""
Client Routes

Balances are read-only here: they move only through invoices and cash
transactions (or the `flask clients set-balance` maintenance command).
"""

from flask import Blueprint, current_app, request

from ..services import client_service
from ..services.errors import NotFoundError, PersistenceError
from ..validation import ConflictError, ValidationError

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
def list_clients_route():
    """
    Query parameters:
    - type: customer | supplier | employee | other (Arabic labels accepted)
    - active_only: true/false (default false)
    """
    active_only = request.args.get("active_only", "false").lower() == "true"
    try:
        clients = client_service.list_clients(client_type=request.args.get("type"), active_only=active_only)
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"items": [c.to_dict() for c in clients], "count": len(clients)}


@clients_bp.get("/<int:client_id>")
def get_client_route(client_id: int):
    try:
        return {"client": client_service.get_client(client_id).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@clients_bp.post("")
def create_client_route():
    try:
        client = client_service.create_client(request.get_json(silent=True))
        return {"client": client.to_dict()}, 201
    except ValidationError as e:
        return {"error": str(e)}, 400
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to create client")
        return {"error": "Failed to create client"}, 500


@clients_bp.route("/<int:client_id>", methods=["PUT", "PATCH"])
def update_client_route(client_id: int):
    try:
        client = client_service.update_client(client_id, request.get_json(silent=True))
        return {"client": client.to_dict()}
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update client")
        return {"error": "Failed to update client"}, 500


@clients_bp.delete("/<int:client_id>")
def delete_client_route(client_id: int):
    try:
        return {"client": client_service.delete_client(client_id)}
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to delete client")
        return {"error": "Failed to delete client"}, 500


@clients_bp.get("/by-name/<name>")
def get_client_by_name_route(name: str):
    try:
        return {"client": client_service.get_client_by_name(name).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404
