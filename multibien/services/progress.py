# multibien/services/progress.py

import threading
import time
import uuid
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Optional

from multibien.utils.logging import get_logger

logger = get_logger("progress")

FINAL_STATUSES = ("complete", "error")


@dataclass
class ProgressData:
    total: int = 0
    processed: int = 0
    percentage: int = 0
    status: str = "pending"
    error: Optional[str] = None
    updated_at: float = 0.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d.pop("updated_at")
        return d


class ProgressTracker:
    """
    Progreso de exports consultable por id (polling), alimentado con los
    mismos registros que el stream escribe en línea.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        idle_timeout_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        # exports sin registro final (nunca iniciados o colgados) vencen
        # pasado el timeout de inactividad más el TTL
        self.idle_timeout_seconds = idle_timeout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._items: Dict[str, ProgressData] = {}

    def register(self) -> str:
        progress_id = uuid.uuid4().hex
        with self._lock:
            self._evict_stale()
            self._items[progress_id] = ProgressData(updated_at=self._clock())
        return progress_id

    def update(self, progress_id: str, record: dict) -> None:
        kind = record.get("type")
        with self._lock:
            data = self._items.get(progress_id)
            if data is None:
                return

            data.total = int(record.get("total", data.total) or 0)
            data.processed = int(record.get("processed", data.processed) or 0)
            data.percentage = int(record.get("percentage", data.percentage) or 0)

            if kind == "progress":
                data.status = record.get("stage", "processing")
            elif kind == "complete":
                data.status = "complete"
            elif kind == "error":
                data.status = "error"
                data.error = record.get("message")

            data.updated_at = self._clock()

    def get(self, progress_id: str) -> Optional[dict]:
        with self._lock:
            data = self._items.get(progress_id)
            return data.to_dict() if data else None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def _evict_stale(self) -> None:
        now = self._clock()
        unfinished_ttl = self.ttl_seconds + self.idle_timeout_seconds
        stale = [
            pid for pid, d in self._items.items()
            if now - d.updated_at > (self.ttl_seconds if d.status in FINAL_STATUSES else unfinished_ttl)
        ]
        for pid in stale:
            del self._items[pid]
        if stale:
            logger.info(f"Progreso: {len(stale)} entradas vencidas eliminadas")


progress_tracker = ProgressTracker()
