# Overview: Flask API routes for liveness checks.

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


@system_bp.get("/health")
def health():
    """
    Liveness + database connectivity.

    Returns 200 {"status": "ok"} when a trivial query succeeds, 503 otherwise.
    """
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("Health check database query failed")
        db.session.rollback()
        return {"status": "unhealthy", "database": "unreachable", "timestamp": utcnow().isoformat() + "Z"}, 503
    return {"status": "ok", "database": "ok", "timestamp": utcnow().isoformat() + "Z"}
