# Overview: Flask API routes for ledger drift inspection and repair.

from flask import Blueprint, current_app

from ..services import reconcile_service
from ..services.errors import PersistenceError

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api/ledger")


@ledger_bp.get("/drift")
def drift_route():
    """Clients and products whose cached balance/stock disagrees with their documents."""
    drift = reconcile_service.find_drift()
    return {"drift": drift, "count": len(drift)}


@ledger_bp.post("/repair")
def repair_route():
    try:
        repaired = reconcile_service.repair_drift()
        return {"repaired": repaired, "count": len(repaired)}
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to repair ledger drift")
        return {"error": "Failed to repair ledger drift"}, 500
