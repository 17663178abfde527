# multibien/models/__init__.py

from .empresa import Empresa, ADMIN_EMPRESA
from .nomina import Nomina
from .documento import Documento
