# multibien/models/documento.py

from multibien.extensions import db


class Documento(db.Model):
    __tablename__ = "documentosajuntos"
    __table_args__ = (
        db.UniqueConstraint("Ruttrabajador", "nombre_documento", name="uq_documento_trabajador_nombre"),
    )

    id_doc = db.Column(db.Integer, primary_key=True)

    rut_empresa = db.Column("RutEmpresa", db.String(20), nullable=False, default="")
    rut_trabajador = db.Column("Ruttrabajador", db.String(50), nullable=False, index=True)

    # FK entera a nominabeca.ID; filas antiguas sólo traen Ruttrabajador
    id_nomina = db.Column(
        db.Integer,
        db.ForeignKey("nominabeca.ID", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    nombre_documento = db.Column(db.String(255), nullable=False)
    contenido_documento = db.Column(db.LargeBinary, nullable=False)
