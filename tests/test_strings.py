# tests/test_strings.py

from decimal import Decimal

from multibien.utils.batching import chunked
from multibien.utils.money import parse_academic_year, parse_grade, parse_int, parse_money
from multibien.utils.strings import label_key, only_digits, sanitize_path_segment


def test_sanitize_path_segment_rut_and_unknown():
    assert sanitize_path_segment("12.345-K") == "12_345_K"
    assert sanitize_path_segment("12345678") == "12345678"
    assert sanitize_path_segment("a/b\\c d") == "a_b_c_d"
    assert sanitize_path_segment("") == "unknown"
    assert sanitize_path_segment(None) == "unknown"


def test_sanitize_path_segment_output_alphabet():
    out = sanitize_path_segment("ñandú../..:*?")
    assert out
    assert all(c.isascii() and (c.isalnum() or c == "_") for c in out)


def test_label_key_variants():
    assert label_key("Nombre Completo") == label_key("nombre  completo") == "NOMBRECOMPLETO"
    assert label_key("Año Academico") == label_key("A単o Academico") == "ANOACADEMICO"


def test_only_digits():
    assert only_digits("76.543.210-K") == "76543210"
    assert only_digits(None) == ""


def test_parse_money_clp():
    assert parse_money("$1.234.567") == Decimal("1234567")
    assert parse_money("1.234") == Decimal("1234")
    assert parse_money("1.234,50") == Decimal("1234.50")
    assert parse_money("(1.234)") == Decimal("-1234")
    assert parse_money("") == Decimal("0")
    assert parse_money(1200) == Decimal("1200")


def test_parse_grade_int_year():
    assert parse_grade("6,5") == Decimal("6.5")
    assert parse_grade("x") == Decimal("0")
    assert parse_int("3 hijos") == 3
    assert parse_int(None) == 0
    assert parse_academic_year("2.025") == "2025"
    assert parse_academic_year(2024.0) == "2024"
    assert parse_academic_year("Cuarto medio") == "Cuarto medio"


def test_chunked_keeps_order():
    assert list(chunked(list(range(7)), 3)) == [[0, 1, 2], [3, 4, 5], [6]]
    assert list(chunked([], 3)) == []
