# multibien/blueprints/documents/routes.py

import io

from flask import Blueprint, current_app, jsonify, request, send_file
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from multibien.blueprints.documents.forms import DocumentUploadForm
from multibien.services.documents import (
    PDF_MIME,
    DuplicateDocumentError,
    delete_document_by_id,
    delete_documents,
    get_all_documents,
    get_document_by_id,
    parse_record_key,
    save_document,
)
from multibien.services.nominas import find_nomina
from multibien.utils.http import db_error_response, json_error
from multibien.utils.logging import get_logger

logger = get_logger("documents_api")

documents_bp = Blueprint("documents", __name__)


@documents_bp.route("", methods=["GET"])
def list_documents():
    row_id = (request.args.get("rowId") or "").strip()
    if not row_id:
        return json_error("rowId es requerido", 400)

    try:
        docs = get_all_documents(row_id)
    except SQLAlchemyError as e:
        return db_error_response(e, f"listar documentos rowId={row_id}")

    return jsonify({
        "exists": bool(docs),
        "metadata": docs[0].to_dict() if docs else None,
        "documents": [d.to_dict() for d in docs],
    })


@documents_bp.route("", methods=["POST"])
def upload_document():
    form = DocumentUploadForm()
    form.limit_size(current_app.config.get("DOCUMENT_MAX_SIZE", 10 * 1024 * 1024))

    if not form.validate_on_submit():
        return json_error(form.first_error(), 400)

    upload = form.file.data
    if upload.mimetype != PDF_MIME:
        return json_error("Solo se permiten archivos PDF", 400)

    row_id = form.rowId.data.strip()
    rut_empresa = (form.rutEmpresa.data or "").strip()
    file_name = secure_filename(upload.filename or "") or "documento.pdf"
    content = upload.read()

    try:
        # el documento queda ligado a la nómina si rowId la identifica
        nomina = find_nomina(row_id)
        id_nomina = nomina.id if nomina else None
        if nomina and not rut_empresa:
            rut_empresa = nomina.rut_empresa or ""

        doc = save_document(row_id, file_name, content, rut_empresa=rut_empresa, id_nomina=id_nomina)

    except DuplicateDocumentError as e:
        return json_error(str(e), 409)
    except ValueError as e:
        return json_error(str(e), 400)
    except SQLAlchemyError as e:
        return db_error_response(e, f"guardar documento rowId={row_id}")

    return jsonify({"message": "Documento guardado", "document": doc.to_dict()}), 201


@documents_bp.route("", methods=["DELETE"])
def remove_documents():
    """
    ?rowId=...&id_doc=... borra ese documento; sólo rowId borra todos los
    documentos del trabajador.
    """
    row_id = (request.args.get("rowId") or "").strip()
    raw_id_doc = request.args.get("id_doc")

    if not row_id and not raw_id_doc:
        return json_error("rowId o id_doc es requerido", 400)

    try:
        if raw_id_doc:
            id_doc = parse_record_key(raw_id_doc)
            if id_doc is None:
                return json_error("id_doc inválido", 400)
            deleted = 1 if delete_document_by_id(id_doc) else 0
        else:
            deleted = delete_documents(row_id)
    except SQLAlchemyError as e:
        return db_error_response(e, f"borrar documentos rowId={row_id} id_doc={raw_id_doc}")

    if not deleted:
        return json_error("No se encontraron documentos para eliminar", 404)

    return jsonify({"message": "Documentos eliminados", "deleted": deleted})


@documents_bp.route("/<int:id_doc>/download", methods=["GET"])
def download_document(id_doc: int):
    try:
        doc = get_document_by_id(id_doc)
    except SQLAlchemyError as e:
        return db_error_response(e, f"descargar documento id_doc={id_doc}")

    if doc is None or not doc.content:
        return json_error("Documento no encontrado", 404)

    return send_file(
        io.BytesIO(doc.content),
        mimetype=doc.file_type,
        as_attachment=True,
        download_name=doc.file_name or f"document_{id_doc}.pdf",
    )
