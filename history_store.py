# history_store.py
# Itinerary and nearby-search history kept across sessions in a small
# key-value store. The in-memory list is authoritative; storage problems are
# logged and never reach the caller.

import json
from pathlib import Path
from typing import Dict, Generic, List, Optional, Protocol, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from config import settings
from logger import get_logger
from models import Itinerary, SearchRecord

logger = get_logger(__name__)

ITINERARY_HISTORY_KEY = "voyage_itinerary_history"
NEARBY_HISTORY_KEY = "voyage_nearby_history"

RecordT = TypeVar("RecordT", bound=BaseModel)


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryBackend:
    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileBackend:
    """One `<key>.json` file per key inside `directory`."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class HistoryStore(Generic[RecordT]):
    """
    Newest-first collection of records with unique ids, persisted under one key.

    `load()` reads the stored collection; any other operation loads lazily
    first. An emptied collection removes the key instead of storing `[]`.
    """

    def __init__(self, backend: KeyValueBackend, key: str, record_type: Type[RecordT]):
        self.backend = backend
        self.key = key
        self.record_type = record_type
        self._adapter = TypeAdapter(List[record_type])
        self._records: List[RecordT] = []
        self._loaded = False

    def load(self) -> List[RecordT]:
        self._records = self._read()
        self._loaded = True
        return self.records

    @property
    def records(self) -> List[RecordT]:
        self._ensure_loaded()
        return list(self._records)

    def __len__(self) -> int:
        return len(self.records)

    def get(self, record_id: str) -> Optional[RecordT]:
        self._ensure_loaded()
        return next((r for r in self._records if r.id == record_id), None)

    def append(self, record: RecordT) -> None:
        self._ensure_loaded()
        if any(r.id == record.id for r in self._records):
            raise ValueError(f"record {record.id!r} is already in {self.key}")
        self._records.insert(0, record)
        self._write()

    def delete(self, record_id: str) -> bool:
        """Returns False (and touches nothing) when the id is unknown."""
        self._ensure_loaded()
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) == len(self._records):
            return False
        self._records = remaining
        self._write()
        return True

    def clear(self) -> None:
        self._ensure_loaded()
        self._records = []
        self._write()

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _read(self) -> List[RecordT]:
        try:
            raw = self.backend.get(self.key)
        except (OSError, UnicodeDecodeError):
            logger.exception("Failed to read history %s", self.key)
            return []
        if raw is None:
            return []
        try:
            records = self._adapter.validate_json(raw)
        except ValidationError as e:
            logger.error("Failed to parse history %s, starting empty: %s", self.key, e)
            return []

        unique = {}
        for record in records:
            unique.setdefault(record.id, record)
        if len(unique) != len(records):
            logger.warning("Dropped %d duplicate record(s) from history %s",
                           len(records) - len(unique), self.key)
        return list(unique.values())

    def _write(self) -> None:
        try:
            if not self._records:
                self.backend.delete(self.key)
                return
            data = [r.model_dump(mode="json", by_alias=True) for r in self._records]
            self.backend.set(self.key, json.dumps(data, ensure_ascii=False))
        except OSError:
            logger.exception("Failed to persist history %s", self.key)


def itinerary_history(backend: Optional[KeyValueBackend] = None) -> HistoryStore[Itinerary]:
    return HistoryStore(backend or JsonFileBackend(settings.HISTORY_DIR), ITINERARY_HISTORY_KEY, Itinerary)


def nearby_history(backend: Optional[KeyValueBackend] = None) -> HistoryStore[SearchRecord]:
    return HistoryStore(backend or JsonFileBackend(settings.HISTORY_DIR), NEARBY_HISTORY_KEY, SearchRecord)
