# multibien/utils/http.py

from flask import jsonify

from multibien.extensions import db
from multibien.utils.logging import get_logger

logger = get_logger("http")


def json_error(message: str, status: int, **extra):
    payload = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def db_error_response(e: Exception, context: str):
    """
    Error de base de datos en un CRUD: se deshace la transacción y se
    responde 500 con el detalle.
    """
    logger.exception(f"Error de base de datos ({context}): {e}")
    db.session.rollback()
    return json_error("Error en la base de datos", 500, message=str(e))
