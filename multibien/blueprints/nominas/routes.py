# multibien/blueprints/nominas/routes.py

from datetime import date

from flask import Blueprint, current_app, jsonify, request, send_file
from sqlalchemy.exc import SQLAlchemyError

from multibien.exporters.excel_export import export_nominas_to_excel
from multibien.services.nominas import (
    create_nomina,
    create_nominas_bulk,
    delete_nomina,
    list_nominas,
    update_nomina,
)
from multibien.utils.http import db_error_response, json_error
from multibien.utils.logging import get_logger
from multibien.utils.nomina_mapper import map_from_database, to_postulacion_empresa

logger = get_logger("nominas_api")

nominas_bp = Blueprint("nominas", __name__)
postulaciones_bp = Blueprint("postulaciones", __name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@nominas_bp.route("", methods=["GET"])
def get_nominas():
    rut_empresa = request.args.get("rutEmpresa")
    try:
        rows = list_nominas(rut_empresa)
    except SQLAlchemyError as e:
        return db_error_response(e, "listar nóminas")
    return jsonify([map_from_database(n) for n in rows])


@nominas_bp.route("", methods=["POST"])
def post_nominas():
    """
    Un objeto crea una nómina; una lista es carga masiva.
    """
    payload = request.get_json(silent=True)
    if not payload:
        return json_error("Se esperaba un objeto o una lista de filas en JSON", 400)

    try:
        if isinstance(payload, list):
            inserted, errors = create_nominas_bulk(
                payload,
                batch_size=current_app.config.get("BULK_INSERT_BATCH_SIZE", 500),
            )
            status = 201 if inserted else 400
            return jsonify({"inserted": inserted, "errors": errors}), status

        if not isinstance(payload, dict):
            return json_error("Formato de nómina inválido", 400)

        nomina = create_nomina(payload)

    except ValueError as e:
        return json_error(str(e), 400)
    except SQLAlchemyError as e:
        return db_error_response(e, "crear nóminas")

    return jsonify(map_from_database(nomina)), 201


@nominas_bp.route("/<identifier>", methods=["PATCH"])
def patch_nomina(identifier: str):
    changes = request.get_json(silent=True)
    if not isinstance(changes, dict) or not changes:
        return json_error("No se enviaron campos para actualizar", 400)

    try:
        nomina = update_nomina(identifier, changes)
    except SQLAlchemyError as e:
        return db_error_response(e, f"actualizar nómina {identifier}")

    if nomina is None:
        return json_error("Nómina no encontrada", 404)
    return jsonify(map_from_database(nomina))


@nominas_bp.route("/<identifier>", methods=["DELETE"])
def remove_nomina(identifier: str):
    try:
        deleted = delete_nomina(identifier)
    except SQLAlchemyError as e:
        return db_error_response(e, f"eliminar nómina {identifier}")

    if not deleted:
        return json_error("Nómina no encontrada", 404)
    return jsonify({"message": "Nómina eliminada"})


@nominas_bp.route("/export", methods=["GET"])
def export_nominas():
    rut_empresa = request.args.get("rutEmpresa")
    try:
        buf = export_nominas_to_excel(rut_empresa)
    except SQLAlchemyError as e:
        return db_error_response(e, "exportar nóminas")

    return send_file(
        buf,
        mimetype=XLSX_MIME,
        as_attachment=True,
        download_name=f"Nominas_{date.today().isoformat()}.xlsx",
    )


@postulaciones_bp.route("/empresa", methods=["GET"])
def postulaciones_empresa():
    rut_empresa = (request.args.get("rutEmpresa") or "").strip()
    if not rut_empresa:
        return json_error("rutEmpresa es requerido", 400)

    try:
        rows = list_nominas(rut_empresa)
    except SQLAlchemyError as e:
        return db_error_response(e, f"postulaciones empresa {rut_empresa}")

    return jsonify([to_postulacion_empresa(n, i) for i, n in enumerate(rows, start=1)])
