# tests/conftest.py

import pytest

from multibien import create_app
from multibien.config import TestConfig
from multibien.extensions import db
from multibien.models import Documento, Empresa, Nomina
from multibien.services.export_slot import export_slot
from multibien.services.progress import progress_tracker

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

    export_slot.clear()
    progress_tracker.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_nomina(app):
    def _make(rut="12.345.678-9", nombre="Juan Pérez", rut_empresa="76.543.210-K", **extra):
        n = Nomina(rut=rut, nombre_completo=nombre, rut_empresa=rut_empresa, **extra)
        db.session.add(n)
        db.session.commit()
        return n
    return _make


@pytest.fixture
def make_document(app):
    def _make(rut_trabajador, nombre="doc.pdf", contenido=PDF_BYTES, id_nomina=None, rut_empresa="76.543.210-K"):
        d = Documento(
            rut_trabajador=rut_trabajador,
            nombre_documento=nombre,
            contenido_documento=contenido,
            id_nomina=id_nomina,
            rut_empresa=rut_empresa,
        )
        db.session.add(d)
        db.session.commit()
        return d
    return _make


@pytest.fixture
def make_empresa(app):
    def _make(rut="76.543.210-K", nombre="Empresa Demo", clave="secreta1"):
        e = Empresa(
            rut=rut, empresa=nombre, operacion="Santiago", encargado="Ana",
            mail="ana@example.com", telefono="123", clave=clave,
        )
        db.session.add(e)
        db.session.commit()
        return e
    return _make
