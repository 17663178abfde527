# tests/test_document_fetch.py

import pytest
from sqlalchemy.exc import OperationalError

from multibien.services import document_fetch
from multibien.services.document_fetch import (
    Fetched,
    Skipped,
    fetch_documents,
    fetch_owner_documents,
    resolve_owner_keys,
)


def test_resolve_owner_keys_nominas_in_id_order(make_nomina):
    a = make_nomina(rut="1-9")
    b = make_nomina(rut="2-7")
    assert resolve_owner_keys("nominas") == [str(a.id), str(b.id)]


def test_resolve_owner_keys_unsupported_table(app):
    with pytest.raises(ValueError):
        resolve_owner_keys("empresas")


def test_fetch_documents_keeps_owner_order(make_nomina, make_document):
    n1 = make_nomina(rut="1-9")
    n2 = make_nomina(rut="2-7")
    d2 = make_document(n2.rut, "n2.pdf", id_nomina=n2.id)
    d1a = make_document(n1.rut, "n1a.pdf", id_nomina=n1.id)
    d1b = make_document(n1.rut, "n1b.pdf", id_nomina=n1.id)

    report = fetch_documents([str(n1.id), str(n2.id)], batch_size=1)

    # dueños en orden; dentro del dueño id_doc descendente
    assert [d.id_doc for d in report.documents] == [d1b.id_doc, d1a.id_doc, d2.id_doc]
    assert all(d.content for d in report.documents)
    assert report.owners == 2
    assert report.skipped == []
    assert report.total_bytes == sum(len(d.content) for d in report.documents)


def test_batch_size_does_not_change_result(make_nomina, make_document):
    keys = []
    for i in range(5):
        n = make_nomina(rut=f"{i}-0")
        make_document(n.rut, f"{i}.pdf", id_nomina=n.id)
        keys.append(str(n.id))

    one = fetch_documents(keys, batch_size=1)
    many = fetch_documents(keys, batch_size=20)
    assert [d.id_doc for d in one.documents] == [d.id_doc for d in many.documents]


def test_empty_content_is_skipped(make_nomina, make_document):
    n = make_nomina()
    make_document(n.rut, "vacio.pdf", contenido=b"", id_nomina=n.id)
    ok = make_document(n.rut, "ok.pdf", id_nomina=n.id)

    results = fetch_owner_documents(str(n.id))
    fetched = [r for r in results if isinstance(r, Fetched)]
    skipped = [r for r in results if isinstance(r, Skipped)]

    assert [r.document.id_doc for r in fetched] == [ok.id_doc]
    assert len(skipped) == 1
    assert skipped[0].reason == "Documento vacío"


def test_owner_read_error_is_skipped_not_raised(make_nomina, make_document, monkeypatch):
    n1 = make_nomina(rut="1-9")
    n2 = make_nomina(rut="2-7")
    make_document(n2.rut, "n2.pdf", id_nomina=n2.id)

    real = document_fetch.get_all_documents

    def flaky(owner_key, record_key=None):
        if owner_key == str(n1.id):
            raise OperationalError("SELECT", {}, Exception("conexión perdida"))
        return real(owner_key, record_key)

    monkeypatch.setattr(document_fetch, "get_all_documents", flaky)

    report = fetch_documents([str(n1.id), str(n2.id)])
    assert [d.file_name for d in report.documents] == ["n2.pdf"]
    assert len(report.skipped) == 1
    assert report.skipped[0].owner_key == str(n1.id)


def test_document_vanished_between_reads(make_nomina, make_document, monkeypatch):
    n = make_nomina()
    d = make_document(n.rut, "x.pdf", id_nomina=n.id)

    monkeypatch.setattr(document_fetch, "get_document_by_id", lambda doc_id: None)

    results = fetch_owner_documents(str(n.id))
    assert results == [Skipped(str(n.id), "Documento no encontrado", d.id_doc)]
