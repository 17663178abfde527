# multibien/services/export_slot.py

import threading

from multibien.utils.logging import get_logger

logger = get_logger("export_slot")

SUPERSEDED_MESSAGE = "Exportación reemplazada por una nueva solicitud"


class ExportSlot:
    """
    Un único export activo por proceso. Instalar un export nuevo cancela
    el anterior (su stream termina en error) y ocupa el slot.
    Los requests llegan en hilos distintos del servidor WSGI: todo cambio
    del slot pasa por el lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active = None

    @property
    def active(self):
        with self._lock:
            return self._active

    def install(self, producer) -> None:
        with self._lock:
            previous = self._active
            if previous is not None and previous is not producer:
                logger.warning(f"Cancelando export activo {previous.export_name}: nueva solicitud {producer.export_name}")
                previous.cancel(SUPERSEDED_MESSAGE)
            self._active = producer

    def release(self, producer) -> bool:
        with self._lock:
            if self._active is producer:
                self._active = None
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._active = None


export_slot = ExportSlot()
