# multibien/utils/strings.py

import re
import unicodedata

_UNSAFE_SEGMENT = re.compile(r"[^A-Za-z0-9_]")

UNKNOWN_FOLDER = "unknown"


def norm_text(value) -> str:
    """
    Normaliza texto:
    - string
    - trim
    - colapsa espacios
    - elimina tildes (Año -> Ano)
    """
    if value is None:
        return ""

    s = str(value).strip()

    s = unicodedata.normalize("NFD", s)
    s = "".join(c for c in s if unicodedata.category(c) != "Mn")

    s = re.sub(r"\s+", " ", s)

    return s


def label_key(value) -> str:
    """
    Clave para comparar encabezados de negocio ("Nombre Completo",
    "nombre  completo", "NOMBRE_COMPLETO" -> "NOMBRECOMPLETO").
    Los encabezados con la ñ corrupta (A単o) quedan igual que "Ano".
    """
    s = norm_text(value).upper().replace("単", "N")
    return re.sub(r"[^A-Z0-9]", "", s)


def only_digits(value) -> str:
    if value is None:
        return ""
    return re.sub(r"[^0-9]", "", str(value))


def sanitize_path_segment(value) -> str:
    """
    Carpeta dentro del ZIP: todo lo que no sea [A-Za-z0-9_] pasa a "_"
    (el guion del RUT también).
    Vacío / None -> "unknown".
    Ej: 12.345-K -> 12_345_K
    """
    if value is None:
        return UNKNOWN_FOLDER
    s = str(value)
    if not s:
        return UNKNOWN_FOLDER
    return _UNSAFE_SEGMENT.sub("_", s)
