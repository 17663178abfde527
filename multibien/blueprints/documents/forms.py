# multibien/blueprints/documents/forms.py

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired, FileSize
from wtforms import StringField
from wtforms.validators import DataRequired, Optional


class DocumentUploadForm(FlaskForm):
    class Meta:
        # API consumida por el frontend, sin token CSRF
        csrf = False

    rowId = StringField("Trabajador", validators=[DataRequired(message="rowId es requerido")])
    rutEmpresa = StringField("RUT Empresa", validators=[Optional()])

    file = FileField(
        "Documento",
        validators=[
            FileRequired(message="No se envió ningún archivo"),
            FileAllowed(["pdf"], "Solo se permiten archivos PDF"),
        ],
    )

    def limit_size(self, max_bytes: int) -> None:
        self.file.validators = list(self.file.validators) + [
            FileSize(max_size=max_bytes, message=f"El archivo supera el máximo de {max_bytes // (1024 * 1024)} MB"),
        ]

    def first_error(self) -> str:
        for errors in self.errors.values():
            if errors:
                return errors[0]
        return "Formulario inválido"
