import csv
import threading
from pathlib import Path
from typing import Iterable

from .errors import SinkError
from .extractor import HEADER


class CsvSink:
    """
    Append-only CSV output file.

    initialize() throws away whatever a previous run left at the path.
    Every row is flushed as soon as it is written, so an aborted run keeps
    the rows produced so far.
    """

    def __init__(self, path, header: Iterable[str] = HEADER):
        self.path = Path(path)
        self.header = tuple(header)
        self.rows_written = 0
        self._fp = None
        self._writer = None
        self._lock = threading.Lock()

    def initialize(self) -> "CsvSink":
        try:
            if self.path.exists():
                self.path.unlink()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fp = self.path.open("a", newline="", encoding="utf-8")
        except OSError as e:
            raise SinkError(f"failed to initialize result file {self.path}: {e}") from e
        self._writer = csv.writer(self._fp, lineterminator="\n")
        self.rows_written = 0
        return self

    def _write(self, row: Iterable[str], count: bool) -> None:
        with self._lock:
            if self._writer is None:
                raise SinkError(f"result file {self.path} is not open")
            try:
                self._writer.writerow(row)
                self._fp.flush()
            except OSError as e:
                raise SinkError(f"failed to write to {self.path}: {e}") from e
            if count:
                self.rows_written += 1

    def write_header(self) -> None:
        self._write(self.header, count=False)

    def write_record(self, row: Iterable[str]) -> None:
        self._write(row, count=True)

    def close(self) -> None:
        with self._lock:
            fp, self._fp, self._writer = self._fp, None, None
        if fp is not None:
            try:
                fp.close()
            except OSError as e:
                raise SinkError(f"failed to close {self.path}: {e}") from e

    def __enter__(self) -> "CsvSink":
        if self._fp is None:
            self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
