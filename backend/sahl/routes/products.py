# Overview: Flask API routes for product master data; parses input and returns JSON responses.

from flask import Blueprint, current_app, request

from ..services import product_service
from ..services.errors import NotFoundError, PersistenceError
from ..validation import ConflictError, ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    """
    Query params:
    - active_only: true/false
    - low_stock: true/false (stock at or below reorder_level)
    """
    active_only = request.args.get("active_only", "false").lower() == "true"
    low_stock = request.args.get("low_stock", "false").lower() == "true"
    products = product_service.list_products(active_only=active_only, low_stock=low_stock)
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        return {"product": product_service.get_product(product_id).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.get("/by-code/<code>")
def get_product_by_code_route(code: str):
    try:
        return {"product": product_service.get_product_by_code(code).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.post("")
def create_product_route():
    try:
        product = product_service.create_product(request.get_json(silent=True))
        return {"product": product.to_dict()}, 201
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Failed to create product"}, 500


@products_bp.route("/<int:product_id>", methods=["PUT", "PATCH"])
def update_product_route(product_id: int):
    try:
        product = product_service.update_product(product_id, request.get_json(silent=True))
        return {"product": product.to_dict()}
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Failed to update product"}, 500


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        return {"product": product_service.delete_product(product_id)}
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Failed to delete product"}, 500
