from datetime import datetime, timezone

from flask import current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lp_builder.extensions import db
from . import v1_bp


@v1_bp.route("/health", methods=["GET"])
def health_check():
    timestamp = datetime.now(timezone.utc).isoformat()

    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error("Health check failed: %s", exc)
        return jsonify({
            "status": "unhealthy",
            "timestamp": timestamp,
            "services": {"database": "down"},
        }), 503

    return jsonify({
        "status": "healthy",
        "timestamp": timestamp,
        "services": {"database": "up"},
    })
