# multibien/config.py

import os

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

    # Azure / Render entregan DATABASE_URL; postgres:// está deprecado
    uri = os.getenv("DATABASE_URL", "postgresql://localhost/multibien")
    if uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)

    # Forzar driver pg8000 si la URL no trae driver explícito
    if uri.startswith("postgresql://") and "+pg8000" not in uri:
        uri = uri.replace("postgresql://", "postgresql+pg8000://", 1)

    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": int(os.getenv("DB_POOL_MAX", "10")),
        "pool_pre_ping": True,
    }

    # Limite request (50MB) y limite por documento PDF (10MB)
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024
    DOCUMENT_MAX_SIZE = int(os.getenv("DOCUMENT_MAX_SIZE", str(10 * 1024 * 1024)))

    # Exportación masiva de documentos
    EXPORT_OWNER_BATCH_SIZE = int(os.getenv("EXPORT_OWNER_BATCH_SIZE", "20"))
    EXPORT_APPEND_BATCH_SIZE = int(os.getenv("EXPORT_APPEND_BATCH_SIZE", "10"))
    EXPORT_IDLE_TIMEOUT_SECONDS = float(os.getenv("EXPORT_IDLE_TIMEOUT_SECONDS", str(15 * 60)))
    PROGRESS_TTL_SECONDS = float(os.getenv("PROGRESS_TTL_SECONDS", "3600"))

    # Carga masiva de nóminas
    BULK_INSERT_BATCH_SIZE = int(os.getenv("BULK_INSERT_BATCH_SIZE", "500"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
