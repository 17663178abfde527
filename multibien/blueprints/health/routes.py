# multibien/blueprints/health/routes.py

from flask import Blueprint, jsonify
from sqlalchemy import text

from multibien.extensions import db
from multibien.utils.logging import get_logger

logger = get_logger("health")

health_bp = Blueprint("health", __name__)

@health_bp.route("/")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error(f"Health check: base de datos no disponible: {e}")
        db.session.rollback()
        database = "error"

    status = "healthy" if database == "ok" else "degraded"
    return jsonify({"status": status, "database": database}), (200 if database == "ok" else 503)
