# multibien/utils/nomina_mapper.py

from typing import Callable, Dict, List, Optional, Tuple

from multibien.utils.money import parse_academic_year, parse_grade, parse_int, parse_money
from multibien.utils.strings import label_key


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


# (atributo del modelo, encabezado de negocio, conversor)
# El orden es el de la planilla de nóminas y de la exportación Excel.
FIELDS: List[Tuple[str, str, Callable]] = [
    ("rut", "Rut", _text),
    ("nombre_completo", "Nombre Completo", _text),
    ("email", "Email", _text),
    ("celular", "Celular", _text),
    ("remuneracion_mes_1", "Remuneracion Mes 1", parse_money),
    ("remuneracion_mes_2", "Remuneracion Mes 2", parse_money),
    ("remuneracion_mes_3", "Remuneracion Mes 3", parse_money),
    ("nro_hijos", "Nro Hijos", parse_int),
    ("nombre_beneficiario", "Nombre Beneficiario", _text),
    ("rut_beneficiario", "Rut Beneficiario", _text),
    ("relacion_trabajador", "Relacion con el Trabajador", _text),
    ("edad_beneficiario", "Edad del Beneficiario", parse_int),
    ("ano_academico", "Año Academico", parse_academic_year),
    ("promedio_notas", "Promedio de Notas", parse_grade),
    ("tipo_beca", "Tipo Beca", _text),
    ("razon_social", "Razon Social", _text),
    ("rut_empresa", "Rut Empresa", _text),
    ("operacion", "Operacion", _text),
    ("nro_contrato", "Nro Contrato", _text),
    ("encargado_beca", "Encargado Becas Estudio", _text),
    ("mail_encargado", "Mail Encargado", _text),
    ("telefono_encargado", "Telefono Encargado", _text),
]

# Variantes que llegan desde la carga masiva / planillas antiguas
_SYNONYMS: Dict[str, List[str]] = {
    "rut_empresa": ["Empresa RUT", "RutEmpresa"],
    "encargado_beca": ["EncargadoBeca", "Encargado Beca"],
    "relacion_trabajador": ["RelacionTrabajador"],
}

_BY_KEY: Dict[str, Tuple[str, Callable]] = {}
for _attr, _label, _conv in FIELDS:
    _BY_KEY[label_key(_label)] = (_attr, _conv)
    _BY_KEY[label_key(_attr)] = (_attr, _conv)
    for _alias in _SYNONYMS.get(_attr, []):
        _BY_KEY[label_key(_alias)] = (_attr, _conv)

LABELS: Dict[str, str] = {attr: label for attr, label, _ in FIELDS}


def map_to_database(row: dict) -> dict:
    """
    Fila con encabezados de negocio ("Nombre Completo", "Año Academico", ...)
    -> dict de atributos del modelo, valores ya convertidos.
    Sólo incluye las claves presentes (sirve para updates parciales).
    ID se ignora: lo asigna la base.
    """
    out: dict = {}
    for key, value in (row or {}).items():
        found = _BY_KEY.get(label_key(key))
        if not found:
            continue
        attr, conv = found
        out[attr] = conv(value)
    return out


def _json_value(value):
    # Numeric -> float para JSON / Excel
    if value is None:
        return None
    if hasattr(value, "as_tuple"):
        return float(value)
    return value


def map_from_database(nomina, labels: bool = True) -> dict:
    data: Dict[str, Optional[object]] = {"ID": nomina.id}
    for attr, label, _ in FIELDS:
        data[label if labels else attr] = _json_value(getattr(nomina, attr))
    return data


def to_postulacion_empresa(nomina, nro: int) -> dict:
    """
    Resumen que ve una empresa de sus postulaciones.
    """
    return {
        "nro": nro,
        "id": nomina.id,
        "rut": nomina.rut or "",
        "nombreCompleto": nomina.nombre_completo or "",
        "rutBeneficiario": nomina.rut_beneficiario or "",
        "nombreBeneficiario": nomina.nombre_beneficiario or "",
        "tipoBeca": nomina.tipo_beca or "",
        "promedioNotas": _json_value(nomina.promedio_notas) or 0,
        "rutEmpresa": nomina.rut_empresa or "",
    }
