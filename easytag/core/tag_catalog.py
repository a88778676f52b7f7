"""Persist and load the tag catalog (JSON array of tags)."""
import base64
import binascii
import copy
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from easytag.core.exceptions import PersistenceFailure
from easytag.core.ndef_codec import TypeNameFormat
from easytag.models.record import NdefRecord
from easytag.models.tag import Tag, Writability

logger = logging.getLogger(__name__)


class BlobStore:
    """Where the serialized catalog lives."""

    def load(self) -> Optional[bytes]:
        raise NotImplementedError

    def store(self, data: bytes) -> None:
        raise NotImplementedError


class FileBlobStore(BlobStore):
    """Catalog blob in a JSON file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[bytes]:
        if not self._path.exists():
            return None
        return self._path.read_bytes()

    def store(self, data: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic replace
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_bytes(data)
        tmp.replace(self._path)


class MemoryBlobStore(BlobStore):
    """In-process store, for simulation and tests."""

    def __init__(self, data: Optional[bytes] = None) -> None:
        self.data = data

    def load(self) -> Optional[bytes]:
        return self.data

    def store(self, data: bytes) -> None:
        self.data = data


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(text: Optional[str]) -> bytes:
    if text is None:
        return b""
    if not isinstance(text, str):
        raise TypeError(f"expected base64 text, got {type(text).__name__}")
    return base64.b64decode(text.encode("ascii"), validate=True)


def _text(item: dict, key: str) -> str:
    value = item.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _id(item: dict) -> str:
    value = item["id"]
    if not isinstance(value, str) or not value:
        raise ValueError(f"invalid id {value!r}")
    return value


def record_to_dict(r: NdefRecord) -> dict:
    return {
        "id": r.id,
        "format": int(r.format),
        "type": r.type,
        "identifier": _b64(r.identifier),
        "payload": _b64(r.payload),
    }


def record_from_dict(item: dict) -> NdefRecord:
    return NdefRecord(
        id=_id(item),
        format=TypeNameFormat(item["format"]),
        type=_text(item, "type"),
        identifier=_unb64(item.get("identifier")),
        payload=_unb64(item.get("payload")),
    )


def tag_to_dict(t: Tag) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "identifier": _b64(t.uid),
        "isWritable": t.writability.to_bool(),
        "memorySize": t.memory_size,
        "records": [record_to_dict(r) for r in t.records],
        "timestamp": t.timestamp.isoformat(),
        "isoStandard": t.iso_standard,
        "tagFamily": t.tag_family,
    }


def tag_from_dict(item: dict) -> Tag:
    timestamp = datetime.fromisoformat(item["timestamp"])
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return Tag(
        id=_id(item),
        name=_text(item, "name"),
        uid=_unb64(item.get("identifier")),
        writability=Writability.from_bool(item.get("isWritable")),
        memory_size=int(item.get("memorySize") or 0),
        timestamp=timestamp,
        records=[record_from_dict(r) for r in item.get("records") or []],
        iso_standard=_text(item, "isoStandard"),
        tag_family=_text(item, "tagFamily"),
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TagCatalog:
    """Ordered collection of tags keyed by Tag.id, persisted as one blob.

    Every mutation rewrites the whole blob, so mutations are serialized.
    The catalog keeps its own copies: saved tags and tags handed out by the
    read methods are detached from the stored ones.
    """

    def __init__(self, store: BlobStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock
        self._tags: List[Tag] = []
        self._lock = threading.Lock()

    def load(self) -> None:
        """Load from the store. A missing or corrupt blob leaves the catalog empty."""
        with self._lock:
            self._tags = self._read()
        logger.info("Loaded %d tag(s)", len(self._tags))

    def _read(self) -> List[Tag]:
        try:
            blob = self._store.load()
        except OSError as e:
            logger.warning("Could not read tag catalog, starting empty: %s", e)
            return []
        if blob is None:
            return []
        try:
            data = json.loads(blob)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Tag catalog is corrupt, starting empty: %s", e)
            return []
        if not isinstance(data, list):
            logger.warning("Tag catalog is not a JSON array, starting empty")
            return []
        out = []
        for item in data:
            try:
                out.append(tag_from_dict(item))
            except (AttributeError, KeyError, TypeError, ValueError, binascii.Error) as e:
                logger.warning("Skipping unreadable catalog entry: %s", e)
                continue
        return out

    def _write(self) -> None:
        data = json.dumps([tag_to_dict(t) for t in self._tags], indent=2).encode("utf-8")
        try:
            self._store.store(data)
        except OSError as e:
            logger.warning("Could not write tag catalog: %s", e)
            raise PersistenceFailure("Failed to save tags", {"error": str(e)}) from e

    # Mutations

    def save(self, tag: Tag) -> Tag:
        """Insert or replace a copy of tag by id, keeping the original position.

        Stamps tag.timestamp. Later changes to tag need another save.

        Raises PersistenceFailure if the store rejects the write; the
        in-memory catalog keeps the change.
        """
        with self._lock:
            tag.timestamp = self._clock()
            stored = copy.deepcopy(tag)
            for i, existing in enumerate(self._tags):
                if existing.id == tag.id:
                    self._tags[i] = stored
                    break
            else:
                self._tags.append(stored)
            self._write()
        return tag

    def delete(self, tag_id: str) -> bool:
        """Remove by id; returns True if found. Nothing is written when absent."""
        with self._lock:
            for i, t in enumerate(self._tags):
                if t.id == tag_id:
                    self._tags.pop(i)
                    self._write()
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._tags = []
            self._write()

    # Reads

    def _snapshot(self) -> List[Tag]:
        with self._lock:
            return copy.deepcopy(self._tags)

    @property
    def tags(self) -> List[Tag]:
        return self._snapshot()

    def get(self, tag_id: str) -> Optional[Tag]:
        return self.find(lambda t: t.id == tag_id)

    def get_by_uid(self, uid: bytes) -> Optional[Tag]:
        uid = bytes(uid)
        if not uid:
            return None
        return self.find(lambda t: t.uid == uid)

    def find(self, predicate: Callable[[Tag], bool]) -> Optional[Tag]:
        for t in self._snapshot():
            if predicate(t):
                return t
        return None

    def filter(self, predicate: Callable[[Tag], bool]) -> List[Tag]:
        return [t for t in self._snapshot() if predicate(t)]

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._snapshot())

    def __contains__(self, tag_id: object) -> bool:
        return any(t.id == tag_id for t in self._tags)
