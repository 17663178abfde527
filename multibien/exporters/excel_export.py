# multibien/exporters/excel_export.py

import io
from typing import Optional

import pandas as pd

from multibien.services.nominas import list_nominas
from multibien.utils.logging import get_logger
from multibien.utils.nomina_mapper import FIELDS, map_from_database

logger = get_logger("excel_export")

SHEET_NOMINAS = "Nominas"


def export_nominas_to_excel(rut_empresa: Optional[str] = None) -> io.BytesIO:
    """
    Planilla de nóminas (una hoja, encabezados de negocio).
    Con rut_empresa exporta sólo las postulaciones de esa empresa.
    """
    nominas = list_nominas(rut_empresa=rut_empresa)

    columns = ["ID"] + [label for _, label, _ in FIELDS]
    df = pd.DataFrame([map_from_database(n) for n in nominas], columns=columns)

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NOMINAS, index=False)
    out.seek(0)

    logger.info(f"Excel de nóminas generado filas={len(df)} empresa={rut_empresa or 'todas'}")
    return out
