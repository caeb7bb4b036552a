"""
Persistent local store with JSON-file persistence.

Every collection lives under its own storage key (one JSON document per key in
the data directory), plus one key for the active-session pointer. The store
also handles whole-store export/import and factory reset.

Single writer assumed: two processes saving the same collection race and the
last writer wins.
"""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..utils.exceptions import MalformedImport, StorageError
from ..utils.logger import get_logger
from .seed_data import seed_for

logger = get_logger(__name__)

COLLECTIONS = (
    "users",
    "announcements",
    "gallery",
    "locations",
    "subscribers",
    "campaigns",
    "chats",
    "departments",
)


class LocalStore:
    """Key-namespaced durable storage for every entity collection"""

    def __init__(self, data_dir: Union[str, Path] = "data", key_prefix: str = "ccap"):
        self.data_dir = Path(data_dir)
        self.key_prefix = key_prefix
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def storage_key(self, collection: str) -> str:
        if collection not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {collection}")
        return f"{self.key_prefix}_system_{collection}"

    @property
    def session_key(self) -> str:
        return f"{self.key_prefix}_active_user"

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def _load(self, key: str, fallback: Any) -> Any:
        """Parse a stored key, falling back on absence or corruption"""
        try:
            raw = self._read_raw(key)
            return json.loads(raw) if raw else fallback
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error loading key", key=key, error=str(e))
            return fallback

    def _remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def _atomic_write(self, key: str, data: Any) -> None:
        """Write JSON file atomically"""
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with tempfile.NamedTemporaryFile(
                mode="w", dir=str(path.parent), delete=False, encoding="utf-8"
            ) as tf:
                json.dump(data, tf, indent=2, ensure_ascii=False, default=str)
                temp_path = Path(tf.name)
        except OSError as e:
            raise StorageError(f"Failed to save {key}: {str(e)}")

        try:
            shutil.move(str(temp_path), str(path))
        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to save {key} to {path}: {str(e)}")

    # Collections

    def get_all(self, collection: str) -> List[Dict[str, Any]]:
        """Return the stored list, or the seed contents if never saved"""
        data = self._load(self.storage_key(collection), None)
        if not isinstance(data, list):
            if data is not None:
                logger.error("Stored collection is not a list", collection=collection)
            return seed_for(collection)
        return data

    def save_all(self, collection: str, records: List[Dict[str, Any]]) -> None:
        self._atomic_write(self.storage_key(collection), list(records))

    def has(self, collection: str) -> bool:
        return self._path(self.storage_key(collection)).exists()

    # Session pointer

    def get_session(self) -> Optional[Dict[str, Any]]:
        data = self._load(self.session_key, None)
        return data if isinstance(data, dict) else None

    def set_session(self, user: Optional[Dict[str, Any]]) -> None:
        if user:
            self._atomic_write(self.session_key, user)
        else:
            self._remove(self.session_key)

    # Whole-store management

    def export(self) -> str:
        """
        Export every collection as one JSON document.

        Keys are collection names; each value is the raw serialized collection
        text, or null when the collection was never written. The session
        pointer is not exported.
        """
        data: Dict[str, Optional[str]] = {}
        for collection in COLLECTIONS:
            try:
                data[collection] = self._read_raw(self.storage_key(collection))
            except OSError as e:
                raise StorageError(f"Failed to read {collection} for export: {str(e)}")
        return json.dumps(data, indent=2)

    def import_(self, document: Union[str, bytes, Dict[str, Any]]) -> int:
        """
        Import a document produced by ``export``.

        All present collections are validated before anything is written, so
        a bad payload leaves the store untouched. Collection keys may be
        lower- or upper-case; unknown keys are ignored, and null values leave
        that collection as it is.
        Callers must reload their in-memory state afterwards.

        Returns:
            Number of collections written

        Raises:
            MalformedImport: If the payload is not an export document
        """
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedImport(f"Import payload is not valid JSON: {str(e)}")

        if not isinstance(document, dict):
            raise MalformedImport("Import payload must be a JSON object keyed by collection")

        known = [c for c in COLLECTIONS if c in document or c.upper() in document]
        if not known:
            raise MalformedImport("Import payload contains no known collections")

        staged: Dict[str, List[Any]] = {}
        for collection in known:
            # Backups keyed by the upper-case names (USERS, CHATS...) are accepted too
            value = document.get(collection, document.get(collection.upper()))
            if not value:
                continue
            if isinstance(value, str):
                try:
                    value = json.loads(value)
                except json.JSONDecodeError as e:
                    raise MalformedImport(f"Collection '{collection}' is not valid JSON: {str(e)}")
            if not isinstance(value, list):
                raise MalformedImport(f"Collection '{collection}' must be a JSON array")
            staged[collection] = value

        for collection, records in staged.items():
            self.save_all(collection, records)

        logger.info("Imported local store", collections=sorted(staged))
        return len(staged)

    def reset(self) -> None:
        """Clear every persisted key, including the session pointer"""
        for collection in COLLECTIONS:
            self._remove(self.storage_key(collection))
        self._remove(self.session_key)
        logger.warning("Local store reset", data_dir=str(self.data_dir))
