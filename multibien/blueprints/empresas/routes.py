# multibien/blueprints/empresas/routes.py

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from multibien.services.empresas import (
    create_empresa,
    delete_empresa,
    get_password,
    list_empresas,
    set_password,
    update_empresa,
)
from multibien.utils.http import db_error_response, json_error
from multibien.utils.logging import get_logger

logger = get_logger("empresas_api")

empresas_bp = Blueprint("empresas", __name__)


@empresas_bp.route("", methods=["GET"])
def get_empresas():
    try:
        rows = list_empresas()
    except SQLAlchemyError as e:
        return db_error_response(e, "listar empresas")
    return jsonify([e.to_dict() for e in rows])


@empresas_bp.route("", methods=["POST"])
def post_empresa():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return json_error("Se esperaba un objeto JSON", 400)

    try:
        empresa = create_empresa(data)
    except ValueError as e:
        return json_error(str(e), 400)
    except SQLAlchemyError as e:
        return db_error_response(e, "crear empresa")

    # la contraseña generada se informa una sola vez al crear
    return jsonify(empresa.to_dict(include_password=True)), 201


@empresas_bp.route("/password", methods=["GET"])
def get_empresa_password():
    rut = (request.args.get("rut") or "").strip()
    if not rut:
        return json_error("rut es requerido", 400)

    try:
        clave = get_password(rut)
    except SQLAlchemyError as e:
        return db_error_response(e, f"leer contraseña rut={rut}")

    if clave is None:
        return json_error("Empresa no encontrada", 404)
    return jsonify({"rut": rut, "password": clave})


@empresas_bp.route("/password", methods=["PATCH"])
def patch_empresa_password():
    data = request.get_json(silent=True) or {}
    rut = str(data.get("rut") or "").strip()
    if not rut:
        return json_error("rut es requerido", 400)

    try:
        updated = set_password(rut, data.get("password"))
    except ValueError as e:
        return json_error(str(e), 400)
    except SQLAlchemyError as e:
        return db_error_response(e, f"actualizar contraseña rut={rut}")

    if not updated:
        return json_error("Empresa no encontrada", 404)
    return jsonify({"message": "Contraseña actualizada"})


@empresas_bp.route("/<rut>", methods=["PATCH"])
def patch_empresa(rut: str):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return json_error("No se enviaron campos para actualizar", 400)

    try:
        empresa = update_empresa(rut, data)
    except SQLAlchemyError as e:
        return db_error_response(e, f"actualizar empresa rut={rut}")

    if empresa is None:
        return json_error("Empresa no encontrada", 404)
    return jsonify(empresa.to_dict())


@empresas_bp.route("/<rut>", methods=["DELETE"])
def remove_empresa(rut: str):
    try:
        deleted = delete_empresa(rut)
    except SQLAlchemyError as e:
        return db_error_response(e, f"eliminar empresa rut={rut}")

    if not deleted:
        return json_error("Empresa no encontrada", 404)
    return jsonify({"message": "Empresa eliminada"})
