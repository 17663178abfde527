# multibien/__init__.py

from flask import Flask
from .config import Config
from .extensions import db, migrate
from .utils.logging import configure_logging

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app.config.get("LOG_LEVEL"))

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)

    from .services.progress import progress_tracker
    progress_tracker.ttl_seconds = app.config.get("PROGRESS_TTL_SECONDS", 3600)
    progress_tracker.idle_timeout_seconds = app.config.get("EXPORT_IDLE_TIMEOUT_SECONDS", 15 * 60)

    # Modelos registrados en la metadata antes de create_all / migraciones
    from . import models  # noqa: F401

    # Registrar blueprints
    from .blueprints.api.routes import api_bp
    from .blueprints.health.routes import health_bp
    from .blueprints.files.routes import files_bp
    from .blueprints.documents.routes import documents_bp
    from .blueprints.nominas.routes import nominas_bp, postulaciones_bp
    from .blueprints.empresas.routes import empresas_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(health_bp, url_prefix="/health")
    app.register_blueprint(files_bp, url_prefix="/api/files")
    app.register_blueprint(documents_bp, url_prefix="/api/postulaciones/nominas/documents")
    app.register_blueprint(nominas_bp, url_prefix="/api/nominas")
    app.register_blueprint(postulaciones_bp, url_prefix="/api/postulaciones")
    app.register_blueprint(empresas_bp, url_prefix="/api/empresas")

    return app
