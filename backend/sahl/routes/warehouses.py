# Overview: Flask API routes for warehouses.

from flask import Blueprint, current_app, request

from ..services import warehouse_service
from ..services.errors import NotFoundError, PersistenceError
from ..validation import ConflictError, ValidationError

warehouses_bp = Blueprint("warehouses", __name__, url_prefix="/api/warehouses")


@warehouses_bp.get("")
def list_warehouses_route():
    warehouses = warehouse_service.list_warehouses()
    return {"items": [w.to_dict() for w in warehouses], "count": len(warehouses)}


@warehouses_bp.get("/<int:warehouse_id>")
def get_warehouse_route(warehouse_id: int):
    try:
        return {"warehouse": warehouse_service.get_warehouse(warehouse_id).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@warehouses_bp.post("")
def create_warehouse_route():
    try:
        warehouse = warehouse_service.create_warehouse(request.get_json(silent=True))
        return {"warehouse": warehouse.to_dict()}, 201
    except ValidationError as e:
        return {"error": str(e)}, 400
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to create warehouse")
        return {"error": "Failed to create warehouse"}, 500


@warehouses_bp.route("/<int:warehouse_id>", methods=["PUT", "PATCH"])
def update_warehouse_route(warehouse_id: int):
    try:
        warehouse = warehouse_service.update_warehouse(warehouse_id, request.get_json(silent=True))
        return {"warehouse": warehouse.to_dict()}
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update warehouse")
        return {"error": "Failed to update warehouse"}, 500


@warehouses_bp.delete("/<int:warehouse_id>")
def delete_warehouse_route(warehouse_id: int):
    try:
        warehouse_service.delete_warehouse(warehouse_id)
        return {"deleted": warehouse_id}
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to delete warehouse")
        return {"error": "Failed to delete warehouse"}, 500
