from __future__ import annotations

"""Durable game history.

A `BlobStore` is the raw key/value medium (a JSON file per key, or memory in
tests). `RecordStore` sits on top of it and owns the capped, newest-first
list of `GameRecord`s that the session machine appends to and the
leaderboard reads.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from ..results.schema import GameRecord

logger = logging.getLogger(__name__)

DEFAULT_KEY = "mathsprint.history"
DEFAULT_CAP = 50

_RECORD_LIST = TypeAdapter(List[GameRecord])


class BlobStore(Protocol):
    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, blob: str) -> None: ...


class MemoryBlobStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob


class JsonFileBlobStore:
    """One `<key>.json` file per key inside `data_dir`."""

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        p = self.path_for(key)
        if not p.exists():
            return None
        try:
            return p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", p, e)
            return None

    def save(self, key: str, blob: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        p = self.path_for(key)
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_text(blob, encoding="utf-8")
        os.replace(tmp, p)


def serialize_records(records: List[GameRecord]) -> str:
    return json.dumps([r.to_json() for r in records], ensure_ascii=False, separators=(",", ":"))


def deserialize_records(blob: str) -> List[GameRecord]:
    """Parse a stored blob; raises pydantic.ValidationError when malformed."""
    return _RECORD_LIST.validate_json(blob)


class RecordStore:
    def __init__(self, blobs: BlobStore, key: str = DEFAULT_KEY, cap: int = DEFAULT_CAP) -> None:
        self.blobs = blobs
        self.key = key
        self.cap = int(cap)
        self._records: List[GameRecord] = []

    def load(self) -> List[GameRecord]:
        """Hydrate from the blob store. Missing or corrupt data means no history."""
        blob = self.blobs.load(self.key)
        if blob is None:
            self._records = []
            return self.list()
        try:
            records = deserialize_records(blob)
        except ValidationError as e:
            logger.warning("Discarding unreadable history under %r (%d errors)", self.key, e.error_count())
            records = []
        self._records = records[: self.cap]
        return self.list()

    def list(self) -> List[GameRecord]:
        return list(self._records)

    def append(self, record: GameRecord) -> None:
        """Prepend `record`, keep the newest `cap` entries, and persist."""
        self._records = [record, *self._records][: self.cap]
        self._save()

    def clear(self) -> None:
        self._records = []
        self._save()

    def _save(self) -> None:
        try:
            self.blobs.save(self.key, serialize_records(self._records))
        except OSError as e:
            # Best effort; the in-memory list stays authoritative for this process
            logger.warning("Failed to persist history under %r: %s", self.key, e)
