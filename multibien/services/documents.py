# multibien/services/documents.py

from __future__ import annotations

import re
from dataclasses import dataclass, asdict
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from multibien.extensions import db
from multibien.models import Documento
from multibien.utils.logging import get_logger

logger = get_logger("documents")

PDF_MIME = "application/pdf"


class DuplicateDocumentError(ValueError):
    pass


@dataclass
class DocumentRecord:
    """
    Documento adjunto ya desacoplado de la sesión.
    `content` sólo viene cargado en las lecturas que lo piden.
    """
    id_doc: int
    row_id: str
    id_nomina: Optional[int]
    rut_empresa: str
    file_name: str
    file_size: int
    file_type: str = PDF_MIME
    content: Optional[bytes] = None

    @property
    def size(self) -> int:
        if self.content is not None:
            return len(self.content)
        return self.file_size or 0

    def to_dict(self) -> dict:
        d = asdict(self)
        d.pop("content")
        return {
            "id_doc": d["id_doc"],
            "rowId": d["row_id"],
            "idNomina": d["id_nomina"],
            "rutEmpresa": d["rut_empresa"],
            "fileName": d["file_name"],
            "fileType": d["file_type"],
            "fileSize": d["file_size"],
        }


def parse_record_key(value) -> Optional[int]:
    """
    Clave entera de nominabeca.ID. Cualquier cosa que no sean sólo dígitos
    (un RUT, vacío, None) no es clave entera.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not re.fullmatch(r"[0-9]+", s):
        return None
    return int(s)


def _owner_filter(owner_key: str, record_key=None):
    """
    Direccionamiento dual: un documento pertenece al dueño si coincide
    Ruttrabajador (texto) o id_nomina (entero).
    Las filas históricas tienen sólo uno de los dos poblado; no unificar
    sin revisar los datos con el dueño de la base.
    """
    clauses = [Documento.rut_trabajador == str(owner_key)]

    nomina_id = parse_record_key(record_key if record_key is not None else owner_key)
    if nomina_id is not None:
        clauses.append(Documento.id_nomina == nomina_id)

    return or_(*clauses)


def _metadata_query():
    return db.session.query(
        Documento.id_doc,
        Documento.rut_trabajador,
        Documento.id_nomina,
        Documento.rut_empresa,
        Documento.nombre_documento,
        func.length(Documento.contenido_documento).label("file_size"),
    )


def _from_metadata_row(row) -> DocumentRecord:
    return DocumentRecord(
        id_doc=row.id_doc,
        row_id=row.rut_trabajador,
        id_nomina=row.id_nomina,
        rut_empresa=row.rut_empresa or "",
        file_name=row.nombre_documento,
        file_size=int(row.file_size or 0),
    )


def _from_model(doc: Documento) -> DocumentRecord:
    content = bytes(doc.contenido_documento) if doc.contenido_documento is not None else None
    return DocumentRecord(
        id_doc=doc.id_doc,
        row_id=doc.rut_trabajador,
        id_nomina=doc.id_nomina,
        rut_empresa=doc.rut_empresa or "",
        file_name=doc.nombre_documento,
        file_size=len(content) if content is not None else 0,
        content=content,
    )


def get_document_metadata(owner_key: str, record_key=None, with_content: bool = False) -> Optional[DocumentRecord]:
    """
    Documento más reciente del dueño, o None.
    """
    if with_content:
        doc = (
            Documento.query
            .filter(_owner_filter(owner_key, record_key))
            .order_by(Documento.id_doc.desc())
            .first()
        )
        return _from_model(doc) if doc else None

    row = (
        _metadata_query()
        .filter(_owner_filter(owner_key, record_key))
        .order_by(Documento.id_doc.desc())
        .first()
    )
    return _from_metadata_row(row) if row else None


def get_all_documents(owner_key: str, record_key=None) -> List[DocumentRecord]:
    """
    Metadatos (sin contenido) de todos los documentos del dueño, id_doc descendente.
    """
    rows = (
        _metadata_query()
        .filter(_owner_filter(owner_key, record_key))
        .order_by(Documento.id_doc.desc())
        .all()
    )
    return [_from_metadata_row(r) for r in rows]


def get_document_by_id(doc_id: int) -> Optional[DocumentRecord]:
    doc = db.session.get(Documento, doc_id)
    return _from_model(doc) if doc else None


def get_document_by_file_name(owner_key: str, file_name: str) -> Optional[DocumentRecord]:
    doc = (
        Documento.query
        .filter(Documento.rut_trabajador == str(owner_key))
        .filter(Documento.nombre_documento == file_name)
        .first()
    )
    return _from_model(doc) if doc else None


def save_document(
    owner_key: str,
    file_name: str,
    content: bytes,
    rut_empresa: str = "",
    id_nomina: Optional[int] = None,
) -> DocumentRecord:
    """
    Inserta siempre un documento nuevo. No hay reemplazo: si ya existe el
    mismo nombre para el trabajador se rechaza (hay que borrar antes).
    """
    if not owner_key or not file_name or not content:
        raise ValueError("Faltan parámetros para guardar el documento (rowId, nombre o contenido).")

    if get_document_by_file_name(owner_key, file_name):
        raise DuplicateDocumentError("Ya existe un documento con el mismo nombre para este trabajador")

    doc = Documento(
        rut_empresa=rut_empresa or "",
        rut_trabajador=str(owner_key),
        id_nomina=id_nomina,
        nombre_documento=file_name,
        contenido_documento=content,
    )
    db.session.add(doc)
    try:
        db.session.commit()
    except IntegrityError as e:
        # carrera entre dos uploads con el mismo nombre
        db.session.rollback()
        raise DuplicateDocumentError("Ya existe un documento con el mismo nombre para este trabajador") from e

    logger.info(f"Documento guardado id_doc={doc.id_doc} rowId={owner_key} name={file_name} size={len(content)}")
    return _from_model(doc)


def delete_document_by_id(doc_id: int) -> bool:
    deleted = Documento.query.filter(Documento.id_doc == doc_id).delete(synchronize_session=False)
    db.session.commit()
    logger.info(f"Documento eliminado id_doc={doc_id} filas={deleted}")
    return deleted > 0


def delete_documents(owner_key: str, record_key=None, commit: bool = True) -> int:
    deleted = (
        Documento.query
        .filter(_owner_filter(owner_key, record_key))
        .delete(synchronize_session=False)
    )
    if commit:
        db.session.commit()
    logger.info(f"Documentos eliminados rowId={owner_key} filas={deleted}")
    return deleted
