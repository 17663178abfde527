# multibien/services/nominas.py

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from multibien.extensions import db
from multibien.models import Nomina
from multibien.services.documents import delete_documents, parse_record_key
from multibien.utils.logging import get_logger
from multibien.utils.nomina_mapper import map_to_database

logger = get_logger("nominas")

BATCH_SIZE = 500

# No se actualizan por PATCH: identifican la fila
IMMUTABLE_FIELDS = ("id", "rut")


def list_nominas(rut_empresa: Optional[str] = None) -> List[Nomina]:
    q = Nomina.query
    if rut_empresa:
        q = q.filter(Nomina.rut_empresa == rut_empresa.strip())
    return q.order_by(Nomina.id.asc()).all()


def find_nomina(identifier) -> Optional[Nomina]:
    """
    Identificador numérico -> ID; cualquier otro -> RUT del trabajador.
    """
    nomina_id = parse_record_key(identifier)
    if nomina_id is not None:
        return db.session.get(Nomina, nomina_id)
    if identifier is None or str(identifier).strip() == "":
        return None
    return Nomina.query.filter(Nomina.rut == str(identifier).strip()).first()


def _validate(values: dict) -> None:
    if not values.get("rut"):
        raise ValueError("El RUT del trabajador es requerido")


def create_nomina(row: dict) -> Nomina:
    values = map_to_database(row)
    _validate(values)

    nomina = Nomina(**values)
    db.session.add(nomina)
    db.session.commit()

    logger.info(f"Nómina creada id={nomina.id} rut={nomina.rut}")
    return nomina


def create_nominas_bulk(rows: Iterable[dict], batch_size: int = BATCH_SIZE) -> Tuple[int, List[dict]]:
    """
    Carga masiva: valida todas las filas, inserta las válidas por lotes.
    Retorna (insertadas, errores[{fila, error}]).
    """
    buf: List[dict] = []
    errors: List[dict] = []
    inserted = 0

    for i, row in enumerate(rows, start=1):
        try:
            values = map_to_database(row)
            _validate(values)
        except ValueError as e:
            errors.append({"fila": i, "error": str(e)})
            continue

        buf.append(values)
        if len(buf) >= batch_size:
            db.session.bulk_insert_mappings(Nomina, buf)
            db.session.commit()
            inserted += len(buf)
            buf.clear()

    if buf:
        db.session.bulk_insert_mappings(Nomina, buf)
        db.session.commit()
        inserted += len(buf)

    logger.info(f"Carga masiva nóminas: insertadas={inserted} errores={len(errors)}")
    return inserted, errors


def update_nomina(identifier, changes: dict) -> Optional[Nomina]:
    nomina = find_nomina(identifier)
    if nomina is None:
        logger.warning(f"No existe nómina con identificador {identifier}")
        return None

    values = map_to_database(changes)
    for attr, value in values.items():
        if attr in IMMUTABLE_FIELDS:
            continue
        setattr(nomina, attr, value)

    db.session.commit()
    logger.info(f"Nómina actualizada id={nomina.id} campos={sorted(values)}")
    return nomina


def delete_nomina(identifier) -> bool:
    """
    Borra la nómina y sus documentos adjuntos (por ID y por RUT).
    """
    nomina = find_nomina(identifier)
    if nomina is None:
        return False

    nomina_id, rut = nomina.id, nomina.rut
    docs = delete_documents(str(nomina_id), commit=False)
    if rut:
        docs += delete_documents(rut, commit=False)

    db.session.delete(nomina)
    db.session.commit()

    logger.info(f"Nómina eliminada id={nomina_id} rut={rut} documentos={docs}")
    return True
