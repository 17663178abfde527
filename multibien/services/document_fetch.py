# multibien/services/document_fetch.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from multibien.extensions import db
from multibien.models import Nomina
from multibien.services.documents import DocumentRecord, get_all_documents, get_document_by_id
from multibien.utils.batching import chunked
from multibien.utils.logging import get_logger

logger = get_logger("document_fetch")

OWNER_BATCH_SIZE = 20

SUPPORTED_TABLES = ("nominas",)


@dataclass(frozen=True)
class Fetched:
    owner_key: str
    document: DocumentRecord


@dataclass(frozen=True)
class Skipped:
    owner_key: str
    reason: str
    document_id: Optional[int] = None


FetchResult = Union[Fetched, Skipped]


@dataclass
class FetchReport:
    results: List[FetchResult] = field(default_factory=list)
    owners: int = 0

    @property
    def documents(self) -> List[DocumentRecord]:
        return [r.document for r in self.results if isinstance(r, Fetched)]

    @property
    def skipped(self) -> List[Skipped]:
        return [r for r in self.results if isinstance(r, Skipped)]

    @property
    def total_bytes(self) -> int:
        return sum(d.size for d in self.documents)


def resolve_owner_keys(table_id: str) -> List[str]:
    """
    Snapshot de dueños para una exportación. Para nóminas la clave es el
    ID de nominabeca como texto (los documentos la matchean por id_nomina
    o por Ruttrabajador).
    Errores de base de datos se propagan: sin owners no hay export.
    """
    if table_id not in SUPPORTED_TABLES:
        raise ValueError(f'La tabla "{table_id}" no está soportada para descarga de archivos')

    rows = db.session.query(Nomina.id).order_by(Nomina.id.asc()).all()
    keys = [str(r.id) for r in rows]
    logger.info(f"Owners resueltos table={table_id} total={len(keys)}")
    return keys


def _rollback_quietly() -> None:
    try:
        db.session.rollback()
    except Exception as e:
        logger.warning(f"Rollback falló tras error de lectura: {e}")


def fetch_owner_documents(owner_key: str) -> List[FetchResult]:
    """
    Metadatos del dueño y luego cada documento con contenido.
    Nunca lanza: cada falla queda como Skipped.
    """
    try:
        metas = get_all_documents(owner_key)
    except Exception as e:
        logger.warning(f"No se pudieron leer documentos owner={owner_key}: {e}")
        _rollback_quietly()
        return [Skipped(owner_key, f"Error leyendo documentos del dueño: {e}")]

    results: List[FetchResult] = []
    for meta in metas:
        if not meta.id_doc:
            results.append(Skipped(owner_key, "Metadato sin id_doc"))
            continue

        try:
            doc = get_document_by_id(meta.id_doc)
        except Exception as e:
            logger.warning(f"No se pudo obtener documento id_doc={meta.id_doc} owner={owner_key}: {e}")
            _rollback_quietly()
            results.append(Skipped(owner_key, f"Error leyendo documento: {e}", meta.id_doc))
            continue

        if doc is None:
            results.append(Skipped(owner_key, "Documento no encontrado", meta.id_doc))
        elif not doc.content:
            logger.warning(f"Documento vacío id_doc={meta.id_doc} name={meta.file_name}")
            results.append(Skipped(owner_key, "Documento vacío", meta.id_doc))
        else:
            results.append(Fetched(owner_key, doc))

    return results


def fetch_documents(owner_keys: Iterable[str], batch_size: int = OWNER_BATCH_SIZE) -> FetchReport:
    """
    Recorre los dueños en lotes, en orden y de a uno (no en paralelo) para
    no ocupar más de una conexión del pool por export.
    El lote sólo acota memoria/logs; no cambia el resultado.
    """
    report = FetchReport()
    keys = list(owner_keys)

    for n, batch in enumerate(chunked(keys, batch_size), start=1):
        for owner_key in batch:
            report.results.extend(fetch_owner_documents(owner_key))
            report.owners += 1

        logger.info(
            f"Lote {n}: owners={report.owners}/{len(keys)} "
            f"documentos={len(report.documents)} omitidos={len(report.skipped)}"
        )

    return report
