# tests/test_nominas.py

import io
from decimal import Decimal

from openpyxl import load_workbook

from multibien.models import Documento, Nomina
from multibien.services.nominas import create_nominas_bulk, find_nomina
from multibien.utils.nomina_mapper import map_from_database, map_to_database

ROW = {
    "Rut": "12.345.678-9",
    "Nombre Completo": "  Juan Pérez ",
    "Remuneracion Mes 1": "$1.234.567",
    "Nro Hijos": "2",
    "Año Academico": "2.025",
    "Promedio de Notas": "6,5",
    "Tipo Beca": "Excelencia",
    "Empresa RUT": "76.543.210-K",
    "ID": 999,
    "Columna Desconocida": "x",
}


def test_map_to_database_converts_and_ignores_unknown():
    values = map_to_database(ROW)
    assert values["rut"] == "12.345.678-9"
    assert values["nombre_completo"] == "Juan Pérez"
    assert values["remuneracion_mes_1"] == Decimal("1234567")
    assert values["nro_hijos"] == 2
    assert values["ano_academico"] == "2025"
    assert values["promedio_notas"] == Decimal("6.5")
    assert values["rut_empresa"] == "76.543.210-K"
    assert "id" not in values
    assert len(values) == 8


def test_create_and_list_nominas(client):
    r = client.post("/api/nominas", json=ROW)
    assert r.status_code == 201
    created = r.get_json()
    assert created["ID"]
    assert created["Promedio de Notas"] == 6.5

    client.post("/api/nominas", json={"Rut": "2-7", "Rut Empresa": "99.999.999-9"})

    assert len(client.get("/api/nominas").get_json()) == 2
    solo = client.get("/api/nominas", query_string={"rutEmpresa": "76.543.210-K"}).get_json()
    assert [n["Rut"] for n in solo] == ["12.345.678-9"]


def test_create_nomina_requires_rut(client):
    r = client.post("/api/nominas", json={"Nombre Completo": "Sin RUT"})
    assert r.status_code == 400
    assert client.post("/api/nominas", data="no json").status_code == 400


def test_bulk_insert_keeps_valid_rows(app):
    rows = [{"Rut": f"{i}-0", "Nombre Completo": f"T{i}"} for i in range(7)]
    rows.insert(3, {"Nombre Completo": "sin rut"})

    inserted, errors = create_nominas_bulk(rows, batch_size=3)
    assert inserted == 7
    assert errors == [{"fila": 4, "error": "El RUT del trabajador es requerido"}]
    assert Nomina.query.count() == 7


def test_bulk_endpoint(client):
    r = client.post("/api/nominas", json=[{"Rut": "1-9"}, {"Rut": "2-7"}, {}])
    assert r.status_code == 201
    assert r.get_json()["inserted"] == 2
    assert len(r.get_json()["errors"]) == 1


def test_find_nomina_by_id_or_rut(make_nomina):
    n = make_nomina(rut="12.345.678-9")
    assert find_nomina(str(n.id)).id == n.id
    assert find_nomina(n.id).id == n.id
    assert find_nomina("12.345.678-9").id == n.id
    assert find_nomina("") is None
    assert find_nomina("0") is None


def test_patch_nomina_by_rut_keeps_identity(client, make_nomina):
    n = make_nomina(rut="12.345.678-9")

    r = client.patch("/api/nominas/12.345.678-9", json={"Tipo Beca": "Deportiva", "Rut": "otro", "ID": 5})
    assert r.status_code == 200
    body = r.get_json()
    assert body["Tipo Beca"] == "Deportiva"
    assert body["Rut"] == "12.345.678-9"
    assert body["ID"] == n.id

    assert client.patch("/api/nominas/999", json={"Tipo Beca": "x"}).status_code == 404
    assert client.patch(f"/api/nominas/{n.id}", json={}).status_code == 400


def test_delete_nomina_removes_its_documents(client, make_nomina, make_document):
    n = make_nomina(rut="12.345.678-9")
    make_document(n.rut, "por_rut.pdf")
    make_document("otro", "por_id.pdf", id_nomina=n.id)
    make_document("ajeno", "ajeno.pdf")

    r = client.delete(f"/api/nominas/{n.id}")
    assert r.status_code == 200
    assert Nomina.query.count() == 0
    assert [d.nombre_documento for d in Documento.query.all()] == ["ajeno.pdf"]

    assert client.delete(f"/api/nominas/{n.id}").status_code == 404


def test_postulaciones_empresa(client, make_nomina):
    make_nomina(rut="1-9", nombre="Ana", rut_empresa="76", promedio_notas=Decimal("6.1"))
    make_nomina(rut="2-7", nombre="Luis", rut_empresa="76")
    make_nomina(rut="3-5", nombre="Otra", rut_empresa="77")

    r = client.get("/api/postulaciones/empresa", query_string={"rutEmpresa": "76"})
    rows = r.get_json()
    assert [(p["nro"], p["nombreCompleto"]) for p in rows] == [(1, "Ana"), (2, "Luis")]
    assert rows[0]["promedioNotas"] == 6.1

    assert client.get("/api/postulaciones/empresa").status_code == 400


def test_export_excel_has_one_row_per_nomina(client, make_nomina):
    n1 = make_nomina(rut="1-9", nombre="Ana", rut_empresa="76")
    make_nomina(rut="2-7", nombre="Luis", rut_empresa="77")

    r = client.get("/api/nominas/export")
    assert r.status_code == 200
    assert "spreadsheetml" in r.mimetype

    ws = load_workbook(io.BytesIO(r.data))["Nominas"]
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][:3] == ("ID", "Rut", "Nombre Completo")
    assert len(rows) == 3
    assert rows[1][0] == n1.id
    assert rows[1][2] == "Ana"

    r = client.get("/api/nominas/export", query_string={"rutEmpresa": "77"})
    rows = list(load_workbook(io.BytesIO(r.data))["Nominas"].iter_rows(values_only=True))
    assert len(rows) == 2


def test_map_from_database_labels(make_nomina):
    n = make_nomina(rut="1-9", promedio_notas=Decimal("5.5"))
    data = map_from_database(n)
    assert data["ID"] == n.id
    assert data["Promedio de Notas"] == 5.5
    assert map_from_database(n, labels=False)["promedio_notas"] == 5.5
