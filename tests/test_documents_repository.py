# tests/test_documents_repository.py

import pytest

from multibien.services.documents import (
    DuplicateDocumentError,
    delete_document_by_id,
    delete_documents,
    get_all_documents,
    get_document_by_file_name,
    get_document_by_id,
    get_document_metadata,
    parse_record_key,
    save_document,
)

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


def test_parse_record_key_only_digits():
    assert parse_record_key("42") == 42
    assert parse_record_key(" 7 ") == 7
    assert parse_record_key("12.345.678-9") is None
    assert parse_record_key("12abc") is None
    assert parse_record_key("") is None
    assert parse_record_key(None) is None


def test_dual_addressing_by_rut_or_nomina_id(make_nomina, make_document):
    n = make_nomina()
    by_rut = make_document(n.rut, "rut.pdf")
    by_id = make_document("otro", "id.pdf", id_nomina=n.id)
    make_document("ajeno", "ajeno.pdf")

    docs = get_all_documents(str(n.id))
    assert [d.id_doc for d in docs] == [by_id.id_doc]

    docs = get_all_documents(n.rut, record_key=n.id)
    # más reciente primero
    assert [d.id_doc for d in docs] == [by_id.id_doc, by_rut.id_doc]
    assert all(d.content is None for d in docs)
    assert docs[0].file_size == len(PDF_BYTES)


def test_non_numeric_key_matches_only_rut(make_document):
    make_document("12.345.678-9", "a.pdf")
    make_document("99", "b.pdf", id_nomina=None)

    docs = get_all_documents("12.345.678-9")
    assert [d.file_name for d in docs] == ["a.pdf"]


def test_metadata_returns_newest(make_document):
    make_document("111", "viejo.pdf")
    nuevo = make_document("111", "nuevo.pdf", contenido=b"%PDF-nuevo")

    meta = get_document_metadata("111")
    assert meta.id_doc == nuevo.id_doc
    assert meta.content is None

    full = get_document_metadata("111", with_content=True)
    assert full.content == b"%PDF-nuevo"
    assert full.size == len(b"%PDF-nuevo")

    assert get_document_metadata("sin-docs") is None


def test_get_by_id_and_file_name(make_document):
    d = make_document("111", "cert.pdf")

    doc = get_document_by_id(d.id_doc)
    assert doc.content == PDF_BYTES
    assert doc.row_id == "111"
    assert get_document_by_id(9999) is None

    assert get_document_by_file_name("111", "cert.pdf").id_doc == d.id_doc
    assert get_document_by_file_name("111", "otro.pdf") is None


def test_save_document_rejects_duplicates_and_missing(app):
    doc = save_document("111", "cert.pdf", PDF_BYTES, rut_empresa="76")
    assert doc.id_doc
    assert doc.to_dict()["fileName"] == "cert.pdf"
    assert doc.to_dict()["fileSize"] == len(PDF_BYTES)

    with pytest.raises(DuplicateDocumentError):
        save_document("111", "cert.pdf", PDF_BYTES)

    # mismo nombre, otro trabajador: permitido
    save_document("222", "cert.pdf", PDF_BYTES)

    with pytest.raises(ValueError):
        save_document("111", "vacio.pdf", b"")


def test_delete_documents(make_document):
    a = make_document("111", "a.pdf")
    make_document("111", "b.pdf")
    make_document("222", "c.pdf")

    assert delete_document_by_id(a.id_doc) is True
    assert delete_document_by_id(a.id_doc) is False

    assert delete_documents("111") == 1
    assert get_all_documents("111") == []
    assert len(get_all_documents("222")) == 1
