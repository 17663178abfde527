# multibien/utils/money.py

import re
from datetime import date
from decimal import Decimal, InvalidOperation


def parse_money(value) -> Decimal:
    """
    Convierte remuneraciones tipo '$1.234.567', '1.234.567,50', '$ 1200', 1200 a Decimal.
    Pesos chilenos: el punto es separador de miles y la coma decimal.
      - '1.234' -> 1234 (un solo punto seguido de 3 dígitos = miles)
      - '1234.5' -> 1234.5 (punto con 1-2 decimales se respeta)
      - negativos con paréntesis: (1.234) -> -1234
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return Decimal("0")

    s = str(value).strip()
    if s == "" or s.lower() in ("nan", "none"):
        return Decimal("0")

    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1].strip()

    # Quitar moneda/letras, dejar dígitos, separadores y signo -
    s = re.sub(r"[^\d,.\-]", "", s)
    if s.startswith("-"):
        negative = True
    s = s.replace("-", "")

    if s in ("", "."):
        return Decimal("0")

    if s.count(",") > 0 and s.count(".") > 0:
        if s.rfind(",") > s.rfind("."):
            # 1.234,56
            s = s.replace(".", "").replace(",", ".")
        else:
            # 1,234.56
            s = s.replace(",", "")
    elif s.count(",") == 1:
        s = s.replace(",", ".")
    elif s.count(",") > 1:
        s = s.replace(",", "")
    elif s.count(".") > 1 or re.fullmatch(r"\d{1,3}\.\d{3}", s):
        s = s.replace(".", "")

    try:
        val = Decimal(s)
        return -val if negative else val
    except InvalidOperation:
        return Decimal("0")


def parse_grade(value) -> Decimal:
    """
    Promedio de notas: '6,5' -> 6.5. Sin valor -> 0.
    """
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    s = str(value).strip().replace(",", ".")
    try:
        return Decimal(s)
    except InvalidOperation:
        return Decimal("0")


def parse_int(value) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        return int(value)

    m = re.match(r"\s*(-?\d+)", str(value))
    return int(m.group(1)) if m else 0


def parse_academic_year(value) -> str:
    """
    Año académico: '2.025' / '2025.0' / 2025 -> '2025'.
    Si no parece un año válido (1900..año actual + 10) se devuelve tal cual.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, (int, float)):
        return str(int(value))

    s = str(value).strip()
    digits = re.sub(r"\.0+$", "", s)
    digits = re.sub(r"[^\d]", "", digits)
    if digits:
        year = int(digits)
        if 1900 <= year <= date.today().year + 10:
            return str(year)
    return s
