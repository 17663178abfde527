# multibien/exporters/zip_export.py

from __future__ import annotations

import json
import math
import threading
import time
import zipfile
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from multibien.services.documents import DocumentRecord
from multibien.utils.batching import chunked
from multibien.utils.logging import get_logger
from multibien.utils.strings import sanitize_path_segment

logger = get_logger("zip_export")

APPEND_BATCH_SIZE = 10
IDLE_TIMEOUT_SECONDS = 15 * 60

CLIENT_ABORT_MESSAGE = "Descarga cancelada por el cliente"

# Eventos del productor: ("data", bytes) | ("status", dict)
Event = Tuple[str, object]


class ExportError(RuntimeError):
    pass


class ExportTimeout(ExportError):
    pass


class ExportSuperseded(ExportError):
    pass


class ExportState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    ERRORED = "errored"
    CLOSED = "closed"


def archive_path(export_name: str, doc: DocumentRecord, index: int) -> str:
    """
    {export}/{rut_sanitizado}/{archivo}
    El nombre del archivo se usa tal cual (ya se validó al subirlo).
    """
    folder = sanitize_path_segment(doc.row_id)
    file_name = doc.file_name or f"document_{index}"
    return f"{export_name}/{folder}/{file_name}"


def percentage(processed: int, total: int) -> int:
    if total <= 0:
        return 0
    # redondeo "half up", no el bancario de round()
    return int(math.floor(processed * 100 / total + 0.5))


def encode_status(record: dict) -> bytes:
    return (json.dumps(record, ensure_ascii=False) + "\n").encode("utf-8")


class _ChunkSink:
    """
    Destino de zipfile sin seek/tell: ZipFile escribe en modo streaming
    (data descriptors) y acá se juntan los bytes hasta drenarlos.
    """

    def __init__(self):
        self._chunks: List[bytes] = []

    def write(self, data) -> int:
        if data:
            self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        chunks, self._chunks = self._chunks, []
        return b"".join(chunks)


class _IdleWatchdog:
    def __init__(self, timeout: float, clock: Callable[[], float]):
        self.timeout = timeout
        self._clock = clock
        self._last = clock()

    def touch(self) -> None:
        self._last = self._clock()

    def check(self) -> None:
        idle = self._clock() - self._last
        if idle > self.timeout:
            raise ExportTimeout(f"Exportación sin actividad por {int(idle)}s (límite {int(self.timeout)}s)")


class ArchiveStreamProducer:
    """
    Arma un ZIP a partir de documentos ya cargados y lo entrega como
    secuencia de eventos:

      idle -> preparing -> streaming -> finalizing -> closed
                                 \\-> errored -> closed

    Cada chunk del ZIP sale como ("data", bytes) y cada cambio de progreso
    como ("status", {...}). Fallas al agregar un documento se omiten; el
    resto (zip, timeout, cancelación) termina el stream con un registro de
    error y luego la excepción.

    El timeout de inactividad y la cancelación se evalúan sólo cuando el
    consumidor pide el siguiente evento. Un cliente que mantiene la conexión
    abierta sin leer deja el generador suspendido: el export no vence ni
    libera el slot hasta que se retome la lectura, se corte la conexión
    (GeneratorExit) o llegue una nueva solicitud que lo reemplace.
    """

    def __init__(
        self,
        documents: Sequence[DocumentRecord],
        export_name: str,
        slot=None,
        on_status: Optional[Callable[[dict], None]] = None,
        idle_timeout: float = IDLE_TIMEOUT_SECONDS,
        append_batch_size: int = APPEND_BATCH_SIZE,
        compression: int = zipfile.ZIP_STORED,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.documents = list(documents)
        self.export_name = export_name
        self.slot = slot
        self.on_status = on_status
        self.idle_timeout = idle_timeout
        self.append_batch_size = append_batch_size
        self.compression = compression
        self._clock = clock

        self.state = ExportState.IDLE
        self.total = 0
        self.processed = 0
        self.appended = 0
        self.skipped: List[Tuple[int, str]] = []
        self.error: Optional[BaseException] = None

        self._lock = threading.Lock()
        self._cancel_reason: Optional[str] = None

    # ------------------------------------------------------------
    # control
    # ------------------------------------------------------------
    def cancel(self, reason: str) -> None:
        """
        Pide terminar el stream con error. Se aplica en el próximo punto de
        control (entre documentos o antes de finalizar).
        """
        with self._lock:
            if self._cancel_reason is None:
                self._cancel_reason = reason

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancel_reason is not None

    def _checkpoint(self, watchdog: _IdleWatchdog) -> None:
        with self._lock:
            reason = self._cancel_reason
        if reason:
            raise ExportSuperseded(reason)
        watchdog.check()

    def _set_state(self, state: ExportState) -> None:
        logger.debug(f"Export {self.export_name}: {self.state.value} -> {state.value}")
        self.state = state

    # ------------------------------------------------------------
    # registros de estado
    # ------------------------------------------------------------
    def _status(self, kind: str, **extra) -> Event:
        record = {"type": kind}
        record.update(extra)
        if kind != "error":
            record.update({
                "total": self.total,
                "processed": self.processed,
                "percentage": percentage(self.processed, self.total),
            })
        if self.on_status:
            try:
                self.on_status(record)
            except Exception as e:
                logger.warning(f"Callback de progreso falló: {e}")
        return ("status", record)

    # ------------------------------------------------------------
    # stream
    # ------------------------------------------------------------
    def iter_events(self) -> Iterator[Event]:
        if self.state is not ExportState.IDLE:
            raise ExportError(f"El export {self.export_name} ya fue iniciado")

        if self.slot is not None:
            self.slot.install(self)

        try:
            # 1) preparing: total en bytes antes de escribir nada
            self._set_state(ExportState.PREPARING)
            self.total = sum(d.size for d in self.documents)
            self.processed = 0
            logger.info(f"Export {self.export_name}: documentos={len(self.documents)} bytes={self.total}")
            yield self._status("progress", stage="preparing")

            # 2) streaming
            self._set_state(ExportState.STREAMING)
            sink = _ChunkSink()
            watchdog = _IdleWatchdog(self.idle_timeout, self._clock)
            archive = zipfile.ZipFile(sink, mode="w", compression=self.compression)

            index = 0
            for batch in chunked(self.documents, self.append_batch_size):
                for doc in batch:
                    self._checkpoint(watchdog)
                    index += 1
                    name = archive_path(self.export_name, doc, index)

                    try:
                        archive.writestr(name, doc.content)
                        appended = True
                    except Exception as e:
                        logger.error(f"No se pudo agregar {name} (id_doc={doc.id_doc}): {e}")
                        self.skipped.append((doc.id_doc, str(e)))
                        appended = False

                    # lo escrito se emite igual: los offsets del zip ya lo cuentan
                    data = sink.drain()
                    if data:
                        watchdog.touch()
                        yield ("data", data)

                    if not appended:
                        continue

                    self.appended += 1
                    self.processed += doc.size
                    yield self._status("progress", stage="processing")

            # 3) finalizing: directorio central del zip
            self._checkpoint(watchdog)
            self._set_state(ExportState.FINALIZING)
            archive.close()
            data = sink.drain()
            if data:
                watchdog.touch()
                yield ("data", data)

            self.processed = self.total
            logger.info(
                f"Export {self.export_name} completo: agregados={self.appended} "
                f"omitidos={len(self.skipped)} bytes={self.total}"
            )
            yield self._status("complete")
            self._set_state(ExportState.CLOSED)

        except GeneratorExit:
            # el cliente cortó la descarga
            logger.warning(f"Export {self.export_name} abandonado por el cliente en estado {self.state.value}")
            # registro final sólo para el callback: el generador ya no puede emitir
            self._status("error", message=CLIENT_ABORT_MESSAGE)
            self._set_state(ExportState.CLOSED)
            raise

        except Exception as e:
            self.error = e
            self._set_state(ExportState.ERRORED)
            logger.error(f"Export {self.export_name} falló: {type(e).__name__}: {e}")
            yield self._status("error", message=str(e))
            self._set_state(ExportState.CLOSED)
            if isinstance(e, ExportError):
                raise
            raise ExportError(str(e)) from e

        finally:
            if self.slot is not None:
                self.slot.release(self)

    def iter_bytes(self, inline_status: bool = True) -> Iterator[bytes]:
        """
        Cuerpo HTTP: bytes del zip y, si inline_status, cada registro de
        estado como una línea JSON intercalada.
        """
        events = self.iter_events()
        try:
            for kind, payload in events:
                if kind == "data":
                    yield payload
                elif inline_status:
                    yield encode_status(payload)
        finally:
            # corte del cliente: el cierre llega al productor y libera el slot
            events.close()
