# multibien/models/nomina.py

from multibien.extensions import db


class Nomina(db.Model):
    __tablename__ = "nominabeca"

    id = db.Column("ID", db.Integer, primary_key=True)

    # trabajador
    rut = db.Column("Rut", db.String(20), nullable=False, index=True)
    nombre_completo = db.Column("NombreCompleto", db.String(255), nullable=False, default="")
    email = db.Column("Email", db.String(255), default="")
    celular = db.Column("Celular", db.String(50), default="")

    remuneracion_mes_1 = db.Column("RemuneracionMes1", db.Numeric(14, 2), nullable=False, default=0)
    remuneracion_mes_2 = db.Column("RemuneracionMes2", db.Numeric(14, 2), nullable=False, default=0)
    remuneracion_mes_3 = db.Column("RemuneracionMes3", db.Numeric(14, 2), nullable=False, default=0)
    nro_hijos = db.Column("NroHijos", db.Integer, nullable=False, default=0)

    # beneficiario
    nombre_beneficiario = db.Column("NombreBeneficiario", db.String(255), default="")
    rut_beneficiario = db.Column("RutBeneficiario", db.String(20), default="")
    relacion_trabajador = db.Column("RelacionTrabajador", db.String(80), default="")
    edad_beneficiario = db.Column("EdadBeneficiario", db.Integer, nullable=False, default=0)
    ano_academico = db.Column("AnoAcademico", db.String(20), default="")
    promedio_notas = db.Column("PromedioNotas", db.Numeric(4, 2), nullable=False, default=0)
    tipo_beca = db.Column("TipoBeca", db.String(80), default="")

    # empresa
    razon_social = db.Column("RazonSocial", db.String(255), default="")
    rut_empresa = db.Column("RutEmpresa", db.String(20), index=True, default="")
    operacion = db.Column("Operacion", db.String(255), default="")
    nro_contrato = db.Column("NroContrato", db.String(80), default="")
    encargado_beca = db.Column("EncargadoBeca", db.String(255), default="")
    mail_encargado = db.Column("MailEncargado", db.String(255), default="")
    telefono_encargado = db.Column("TelefonoEncargado", db.String(50), default="")
