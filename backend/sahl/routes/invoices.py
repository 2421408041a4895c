# Overview: Flask API routes for invoices and their items; every write reports ledger warnings.

"""
Invoice Routes

Each write returns {"invoice" | "item": {...}, "warnings": [...]}. Warnings
list balance/stock adjustments that were skipped because the referenced
client or product does not exist (warn policy). Under the strict policy the
same situation is a 404 and nothing is written.
"""

from flask import Blueprint, current_app, request

from ..services import invoice_service
from ..services.errors import NotFoundError, PersistenceError
from ..validation import ValidationError

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
def list_invoices_route():
    """
    Query parameters:
    - type: sale | purchase | sale_return | purchase_return (Arabic labels accepted)
    - client_id: int
    """
    try:
        invoices = invoice_service.list_invoices(
            invoice_type=request.args.get("type"),
            client_id=request.args.get("client_id", type=int),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"items": [i.to_dict() for i in invoices], "count": len(invoices)}


@invoices_bp.get("/<int:invoice_id>")
def get_invoice_route(invoice_id: int):
    try:
        return {"invoice": invoice_service.get_invoice(invoice_id).to_dict(include_items=True)}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@invoices_bp.get("/by-number/<invoice_number>")
def get_invoice_by_number_route(invoice_number: str):
    try:
        return {"invoice": invoice_service.get_invoice_by_number(invoice_number).to_dict(include_items=True)}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@invoices_bp.post("")
def create_invoice_route():
    """
    Request body: invoice fields plus an optional "items" list. The invoice,
    its items and every balance/stock adjustment commit together.
    """
    try:
        result = invoice_service.create_invoice(request.get_json(silent=True))
        return {"invoice": result.document.to_dict(include_items=True), "warnings": result.warnings}, 201
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to create invoice")
        return {"error": "Failed to create invoice"}, 500


@invoices_bp.route("/<int:invoice_id>", methods=["PUT", "PATCH"])
def update_invoice_route(invoice_id: int):
    try:
        result = invoice_service.update_invoice(invoice_id, request.get_json(silent=True))
        return {"invoice": result.document.to_dict(include_items=True), "warnings": result.warnings}
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update invoice")
        return {"error": "Failed to update invoice"}, 500


@invoices_bp.delete("/<int:invoice_id>")
def delete_invoice_route(invoice_id: int):
    try:
        return invoice_service.delete_invoice(invoice_id).to_dict("invoice")
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to delete invoice")
        return {"error": "Failed to delete invoice"}, 500


@invoices_bp.get("/<int:invoice_id>/items")
def list_invoice_items_route(invoice_id: int):
    try:
        items = invoice_service.list_invoice_items(invoice_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"items": [item.to_dict() for item in items], "count": len(items)}


@invoices_bp.get("/<int:invoice_id>/items/<int:item_id>")
def get_invoice_item_route(invoice_id: int, item_id: int):
    try:
        return {"item": invoice_service.get_invoice_item(item_id, invoice_id=invoice_id).to_dict()}
    except NotFoundError as e:
        return {"error": str(e)}, 404


@invoices_bp.post("/<int:invoice_id>/items")
def create_invoice_item_route(invoice_id: int):
    try:
        result = invoice_service.create_invoice_item(invoice_id, request.get_json(silent=True))
        return result.to_dict("item"), 201
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to create invoice item")
        return {"error": "Failed to create invoice item"}, 500


@invoices_bp.route("/<int:invoice_id>/items/<int:item_id>", methods=["PUT", "PATCH"])
def update_invoice_item_route(invoice_id: int, item_id: int):
    try:
        result = invoice_service.update_invoice_item(item_id, request.get_json(silent=True), invoice_id=invoice_id)
        return result.to_dict("item")
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update invoice item")
        return {"error": "Failed to update invoice item"}, 500


@invoices_bp.delete("/<int:invoice_id>/items/<int:item_id>")
def delete_invoice_item_route(invoice_id: int, item_id: int):
    try:
        return invoice_service.delete_invoice_item(item_id, invoice_id=invoice_id).to_dict("item")
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to delete invoice item")
        return {"error": "Failed to delete invoice item"}, 500
