# multibien/blueprints/files/routes.py

from datetime import datetime
from functools import partial

from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context
from sqlalchemy.exc import SQLAlchemyError

from multibien.exporters.zip_export import ArchiveStreamProducer
from multibien.services.document_fetch import SUPPORTED_TABLES, fetch_documents, resolve_owner_keys
from multibien.services.export_slot import export_slot
from multibien.services.progress import progress_tracker
from multibien.utils.logging import get_logger

logger = get_logger("files")

files_bp = Blueprint("files", __name__)

PROGRESS_MODES = ("inline", "poll")


@files_bp.route("/download")
def download():
    """
    ZIP con todos los documentos de la tabla indicada (?tableId=nominas).
    progress=inline (default): líneas JSON de estado intercaladas en el cuerpo.
    progress=poll: cuerpo ZIP puro; el estado se consulta en /progress/<id>.
    """
    table_id = (request.args.get("tableId") or "").strip()
    if not table_id:
        return jsonify({"error": "Falta el parámetro requerido: tableId"}), 400

    mode = (request.args.get("progress") or "inline").strip().lower()
    if mode not in PROGRESS_MODES:
        return jsonify({"error": f"Modo de progreso inválido: {mode}"}), 400

    logger.info(f"Descarga de archivos solicitada table={table_id} progress={mode}")

    if table_id not in SUPPORTED_TABLES:
        logger.info(f"Tabla {table_id} no soportada para descarga de archivos")
        return "", 200

    # 1) dueños + documentos (antes de comprometer headers)
    try:
        owner_keys = resolve_owner_keys(table_id)
    except SQLAlchemyError as e:
        logger.exception(f"Error de base de datos resolviendo owners table={table_id}: {e}")
        return jsonify({"error": "Error en la base de datos", "message": str(e)}), 500

    report = fetch_documents(
        owner_keys,
        batch_size=current_app.config.get("EXPORT_OWNER_BATCH_SIZE", 20),
    )

    logger.info(
        f"Documentos para descarga table={table_id}: encontrados={len(report.documents)} "
        f"omitidos={len(report.skipped)}"
    )

    if not report.documents:
        return "", 204

    # 2) stream
    export_name = f"{table_id}-files-{datetime.utcnow().date().isoformat()}"
    progress_id = progress_tracker.register()

    producer = ArchiveStreamProducer(
        report.documents,
        export_name,
        slot=export_slot,
        on_status=partial(progress_tracker.update, progress_id),
        idle_timeout=current_app.config.get("EXPORT_IDLE_TIMEOUT_SECONDS", 15 * 60),
        append_batch_size=current_app.config.get("EXPORT_APPEND_BATCH_SIZE", 10),
    )

    body = producer.iter_bytes(inline_status=(mode == "inline"))
    response = Response(stream_with_context(body), mimetype="application/zip")
    response.headers["Content-Disposition"] = f'attachment; filename="{export_name}.zip"'
    response.headers["X-Progress-Id"] = progress_id
    response.headers["X-Accel-Buffering"] = "no"
    return response


@files_bp.route("/progress/<progress_id>")
def progress(progress_id: str):
    data = progress_tracker.get(progress_id)
    if data is None:
        return jsonify({"error": "No se encontró progreso para el ID indicado"}), 404
    return jsonify(data)
