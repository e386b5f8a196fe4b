"""
Append-only record collections backed by JSON-array files.

Each collection is one file holding a JSON array. Appends read the whole
array, add the record and rewrite the file through a temp file + os.replace.
Writers on the same path share one lock (see get_store), so two concurrent
appends in this process both land instead of the second clobbering the first.
"""
import json
import os
import stat
import tempfile
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from core.config import logger
from core.errors import Conflict


DEFAULT_FILE_MODE = 0o644


class RecordStore:
    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self._lock = threading.Lock()

    def read_all(self) -> List[Dict[str, Any]]:
        """Return every record. A missing file is an empty collection; other read errors propagate."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return []
        records = json.loads(raw or "[]")
        if not isinstance(records, list):
            raise ValueError(f"{self.path} does not hold a JSON array")
        return records

    def find(self, predicate: Callable[[Dict[str, Any]], bool]) -> Optional[Dict[str, Any]]:
        for rec in self.read_all():
            if isinstance(rec, dict) and predicate(rec):
                return rec
        return None

    def append(self, record: Dict[str, Any], unique_on: Optional[str] = None) -> Dict[str, Any]:
        """Append `record` tagged with a generated id and return the stored copy.

        With `unique_on`, the duplicate check and the append happen under the
        same lock; a record whose value for that key already exists raises Conflict.
        """
        with self._lock:
            records = self.read_all()
            if unique_on is not None:
                value = record.get(unique_on)
                for rec in records:
                    if isinstance(rec, dict) and rec.get(unique_on) == value:
                        raise Conflict(f"duplicate {unique_on}")
            stored = {"id": self._next_id(records)}
            stored.update({k: v for k, v in record.items() if k != "id"})
            records.append(stored)
            self._write(records)
        logger.info(f"[store] appended id={stored['id']} to {os.path.basename(self.path)} (total={len(records)})")
        return stored

    def _next_id(self, records: List[Dict[str, Any]]) -> int:
        # Epoch milliseconds, bumped so ids stay unique and increasing
        candidate = int(time.time() * 1000)
        last = 0
        for rec in records:
            rid = rec.get("id") if isinstance(rec, dict) else None
            if isinstance(rid, int) and rid > last:
                last = rid
        return candidate if candidate > last else last + 1

    def _file_mode(self) -> int:
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return DEFAULT_FILE_MODE

    def _write(self, records: List[Dict[str, Any]]) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            # mkstemp creates 0600; keep the collection's existing mode
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


_STORES: Dict[str, RecordStore] = {}
_STORES_LOCK = threading.Lock()


def get_store(path: str) -> RecordStore:
    """Shared store for `path`; one instance (and one write lock) per file."""
    key = os.path.abspath(path)
    with _STORES_LOCK:
        store = _STORES.get(key)
        if store is None:
            store = RecordStore(key)
            _STORES[key] = store
        return store
