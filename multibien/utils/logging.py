# multibien/utils/logging.py

import logging
import os

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def configure_logging(level: str = None) -> None:
    """
    Configura el handler raíz una sola vez.
    El nivel viene de LOG_LEVEL (default INFO).
    """
    global _configured
    if _configured:
        if level:
            logging.getLogger().setLevel(level.upper())
        return

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=_FORMAT)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"multibien.{name}")
