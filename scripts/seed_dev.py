# scripts/seed_dev.py

from multibien import create_app
from multibien.extensions import db
from multibien.services.documents import save_document
from multibien.services.empresas import create_empresa
from multibien.services.nominas import create_nomina

# PDF mínimo válido para probar la descarga masiva
SAMPLE_PDF = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"

app = create_app()

with app.app_context():
    db.create_all()

    empresa = create_empresa({
        "Rut": "76.543.210-K",
        "Empresa": "Empresa Demo",
        "Operacion": "Santiago",
        "Encargado": "Encargado Demo",
        "Mail": "demo@example.com",
        "Telefono": "+56 9 1234 5678",
    })
    print("Empresa creada:", empresa.id, "clave:", empresa.clave)

    nomina = create_nomina({
        "Rut": "12.345.678-9",
        "Nombre Completo": "Trabajador Demo",
        "Rut Empresa": empresa.rut,
        "Promedio de Notas": "6,5",
        "Tipo Beca": "Excelencia Académica",
    })
    print("Nómina creada:", nomina.id)

    doc = save_document(nomina.rut, "certificado.pdf", SAMPLE_PDF, rut_empresa=empresa.rut, id_nomina=nomina.id)
    print("Documento creado:", doc.id_doc)
