# multibien/models/empresa.py

from multibien.extensions import db

ADMIN_EMPRESA = "admin"


class Empresa(db.Model):
    __tablename__ = "empresacontacto"

    id = db.Column("ID", db.Integer, primary_key=True)
    rut = db.Column("Rut", db.String(20), nullable=False, unique=True, index=True)

    empresa = db.Column("Empresa", db.String(255), nullable=False)
    operacion = db.Column("Operacion", db.String(255), nullable=False, default="")
    encargado = db.Column("Encargado", db.String(255), nullable=False, default="")
    mail = db.Column("Mail", db.String(255), nullable=False, default="")
    telefono = db.Column("Telefono", db.String(50), nullable=False, default="")

    # texto plano: el portal la muestra al administrador
    clave = db.Column("Empresa_C", db.String(255), nullable=False, default="")

    @property
    def is_admin(self) -> bool:
        return (self.empresa or "").strip().lower() == ADMIN_EMPRESA

    def to_dict(self, include_password: bool = False) -> dict:
        data = {
            "ID": self.id,
            "Rut": self.rut,
            "Empresa": self.empresa,
            "Operacion": self.operacion,
            "Encargado": self.encargado,
            "Mail": self.mail,
            "Telefono": self.telefono,
        }
        if include_password:
            data["Empresa_C"] = self.clave
        return data
