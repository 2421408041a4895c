# Overview: Flask API routes for company settings.

from flask import Blueprint, current_app, request

from ..services import settings_service
from ..services.errors import PersistenceError
from ..validation import ValidationError

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
def get_settings_route():
    return {"settings": settings_service.get_settings().to_dict()}


@settings_bp.route("", methods=["PUT", "PATCH"])
def update_settings_route():
    try:
        settings = settings_service.update_settings(request.get_json(silent=True))
        return {"settings": settings.to_dict()}
    except ValidationError as e:
        return {"error": str(e)}, 400
    except PersistenceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to update settings")
        return {"error": "Failed to update settings"}, 500
