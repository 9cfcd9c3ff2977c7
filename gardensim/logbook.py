# gardensim/logbook.py
"""
GardenLogger: append-only, tagged event log for the simulation.

Lines look like `2026-01-01 12:00:00 [RAIN] Auto rainfall: 9 units`. Each line
goes through a stdlib logger (so console handlers configured by the runner
see it), optionally into a log file, into a bounded in-memory tail, and out
to registered listeners.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from pathlib import Path

TS_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_HEADER = "# Garden simulation event log"

logger = logging.getLogger("gardensim.eventlog")


class GardenLogger:
    def __init__(self, log_path=None, tail_limit=250):
        self.log_path = Path(log_path) if log_path else None
        self._tail = deque(maxlen=tail_limit)
        self._listeners = []
        self._lock = threading.Lock()
        self._handler = None
        if self.log_path is not None:
            self._open_file()

    def _open_file(self):
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.log_path.exists():
            self.log_path.write_text(FILE_HEADER + "\n", encoding="utf-8")
        else:
            for line in self.log_path.read_text(encoding="utf-8").splitlines():
                self._tail.append(line)
        self._handler = logging.FileHandler(self.log_path, mode='a', encoding="utf-8")
        self._handler.setFormatter(logging.Formatter("%(message)s"))

    def log(self, tag, message):
        line = f"{datetime.now().strftime(TS_FORMAT)} [{tag}] {message}"
        with self._lock:
            self._tail.append(line)
            listeners = list(self._listeners)
        if self._handler is not None:
            # instance-private file, kept off the shared logger
            self._handler.handle(logging.makeLogRecord(
                {"name": logger.name, "levelno": logging.INFO, "levelname": "INFO", "msg": line}))
        logger.info(line)
        for listener in listeners:
            listener(line)
        return line

    def recent_entries(self):
        with self._lock:
            return list(self._tail)

    def add_listener(self, listener):
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def close(self):
        if self._handler is not None:
            self._handler.close()
            self._handler = None
