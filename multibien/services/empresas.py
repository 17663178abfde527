# multibien/services/empresas.py

from datetime import date
from typing import List, Optional

from multibien.extensions import db
from multibien.models import Empresa
from multibien.utils.logging import get_logger
from multibien.utils.strings import only_digits

logger = get_logger("empresas")

REQUIRED_FIELDS = ("Rut", "Empresa", "Operacion", "Encargado", "Mail", "Telefono")
EDITABLE_FIELDS = {
    "Empresa": "empresa",
    "Operacion": "operacion",
    "Encargado": "encargado",
    "Mail": "mail",
    "Telefono": "telefono",
}
MIN_PASSWORD_LENGTH = 6


def generate_password(rut: str, empresa_id, year: Optional[int] = None) -> str:
    """
    "MB" + ID empresa + primeros 3 dígitos del RUT + año.
    Ej: rut 76.543.210-K, id 7, 2025 -> MB77652025
    """
    year = year or date.today().year
    return f"MB{empresa_id}{only_digits(rut)[:3]}{year}"


def list_empresas() -> List[Empresa]:
    return Empresa.query.order_by(Empresa.id.asc()).all()


def find_empresa(rut: str) -> Optional[Empresa]:
    if not rut:
        return None
    return Empresa.query.filter(Empresa.rut == rut.strip()).first()


def create_empresa(data: dict) -> Empresa:
    missing = [f for f in REQUIRED_FIELDS if not str(data.get(f) or "").strip()]
    if missing:
        raise ValueError(f"Todos los campos son requeridos (faltan: {', '.join(missing)})")

    rut = str(data["Rut"]).strip()
    if find_empresa(rut):
        raise ValueError(f"Ya existe una empresa con RUT {rut}")

    empresa = Empresa(rut=rut, clave="")
    for key, attr in EDITABLE_FIELDS.items():
        setattr(empresa, attr, str(data[key]).strip())

    db.session.add(empresa)
    db.session.flush()  # ID para la contraseña

    empresa.clave = generate_password(rut, empresa.id)
    db.session.commit()

    logger.info(f"Empresa creada id={empresa.id} rut={rut}")
    return empresa


def update_empresa(rut: str, data: dict) -> Optional[Empresa]:
    empresa = find_empresa(rut)
    if empresa is None:
        return None

    for key, attr in EDITABLE_FIELDS.items():
        if key in data and data[key] is not None:
            setattr(empresa, attr, str(data[key]).strip())

    db.session.commit()
    logger.info(f"Empresa actualizada rut={rut}")
    return empresa


def delete_empresa(rut: str) -> bool:
    deleted = Empresa.query.filter(Empresa.rut == (rut or "").strip()).delete(synchronize_session=False)
    db.session.commit()
    logger.info(f"Empresa eliminada rut={rut} filas={deleted}")
    return deleted > 0


def get_password(rut: str) -> Optional[str]:
    empresa = find_empresa(rut)
    return empresa.clave if empresa else None


def set_password(rut: str, new_password: str) -> bool:
    if new_password is not None and not isinstance(new_password, str):
        raise ValueError("La contraseña debe ser texto")
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres")

    empresa = find_empresa(rut)
    if empresa is None:
        return False

    empresa.clave = new_password
    db.session.commit()

    logger.info(f"Contraseña actualizada para empresa rut={rut}")
    return True
