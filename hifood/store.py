"""Whole-file JSON persistence.

Every collection lives in ``<data_dir>/<name>.json`` as a JSON list of
records. Reads never raise: a missing, empty or corrupt file reads as an
empty collection. Writes go to a temp file that is renamed over the target.

``Collection`` mutations run load -> mutate -> save under a per-collection
lock, which serialises writers inside one process only. Separate processes
(or callers pairing ``load``/``save`` by hand) still race, and the later
save wins.
"""
import json
import os
import tempfile
import threading
from typing import Callable, Dict, List, Optional

from .logger import get_logger

_logger = get_logger(__name__)

USERS = "users"
PRODUCTS = "products"
ORDERS = "orders"
SESSIONS = "sessions"

COLLECTIONS = (USERS, PRODUCTS, SESSIONS, ORDERS)

Record = Dict[str, object]

# mkstemp creates files as 0600
FILE_MODE = 0o644


class JsonStore:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def path(self, collection: str) -> str:
        return os.path.join(self.data_dir, f"{collection}.json")

    def ensure_files(self):
        os.makedirs(self.data_dir, exist_ok=True)
        for name in COLLECTIONS:
            if not os.path.exists(self.path(name)):
                self.save(name, [])

    def load(self, collection: str) -> List[Record]:
        path = self.path(collection)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            _logger.warning(f"Could not read {path}: {e}")
            return []
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            _logger.warning(f"Corrupt JSON in {path}, treating as empty: {e}")
            return []
        if not isinstance(data, list):
            _logger.warning(f"{path} does not hold a list, treating as empty")
            return []
        return data

    def save(self, collection: str, records: List[Record]):
        os.makedirs(self.data_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, self.path(collection))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def lock(self, collection: str) -> threading.RLock:
        with self._locks_guard:
            if collection not in self._locks:
                self._locks[collection] = threading.RLock()
            return self._locks[collection]

    def collection(self, name: str, key: str = "id") -> "Collection":
        return Collection(self, name, key)


class Collection:
    """Record repository over one JSON collection, keyed by ``key``."""

    def __init__(self, store: JsonStore, name: str, key: str = "id"):
        self.store = store
        self.name = name
        self.key = key

    def list(self) -> List[Record]:
        return self.store.load(self.name)

    def get(self, record_id) -> Optional[Record]:
        if record_id is None:
            return None
        return self.find(lambda r: r.get(self.key) == record_id)

    def find(self, predicate: Callable[[Record], bool]) -> Optional[Record]:
        for record in self.list():
            if predicate(record):
                return record
        return None

    def append(self, record: Record) -> Record:
        with self.store.lock(self.name):
            records = self.store.load(self.name)
            records.append(record)
            self.store.save(self.name, records)
        return record

    def upsert(self, record: Record) -> Record:
        with self.store.lock(self.name):
            records = self.store.load(self.name)
            for i, existing in enumerate(records):
                if existing.get(self.key) == record.get(self.key):
                    records[i] = record
                    break
            else:
                records.append(record)
            self.store.save(self.name, records)
        return record

    def update(self, record_id, mutate: Callable[[Record], Record]) -> Optional[Record]:
        """Apply ``mutate`` to the stored record under the collection lock."""
        with self.store.lock(self.name):
            records = self.store.load(self.name)
            for i, existing in enumerate(records):
                if existing.get(self.key) == record_id:
                    records[i] = mutate(dict(existing))
                    self.store.save(self.name, records)
                    return records[i]
        return None

    def remove_where(self, predicate: Callable[[Record], bool]) -> int:
        with self.store.lock(self.name):
            records = self.store.load(self.name)
            kept = [r for r in records if not predicate(r)]
            removed = len(records) - len(kept)
            if removed:
                self.store.save(self.name, kept)
        return removed

    def delete(self, record_id) -> bool:
        return self.remove_where(lambda r: r.get(self.key) == record_id) > 0

    def __len__(self):
        return len(self.list())
