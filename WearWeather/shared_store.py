"""
Key/value storage shared between the app and the companion display.

The two processes hand data over through a directory named after a shared
group id. Where that directory cannot be used (sandboxed, read-only, missing
permissions) each process silently falls back to storage of its own, and the
two just stop seeing each other's writes.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from weather_data import WireModel, wire_adapter


class Storage(ABC):
    """Abstract raw text storage keyed by string."""

    @abstractmethod
    def save(self, value: str, key: str) -> None:
        """
        Store text under a key, replacing any previous value atomically.

        Raises:
            OSError: If the underlying storage rejects the write
        """
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Return the text stored under key, or None if there is none."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the value under key; missing keys are not an error."""
        pass


class FileStorage(Storage):
    """One JSON file per key inside a directory."""

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        safe_key = key.replace(os.sep, "_")
        return os.path.join(self.directory, f"{safe_key}.json")

    def save(self, value: str, key: str) -> None:
        # Write then rename so readers never see half a file
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        replaced = False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
            replaced = True
        finally:
            if not replaced and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def load(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def remove(self, key: str) -> None:
        try:
            os.unlink(self._path(key))
        except FileNotFoundError:
            pass


class MemoryStorage(Storage):
    """Process-local storage, gone when the process exits."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def save(self, value: str, key: str) -> None:
        self._values[key] = value

    def load(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


def _is_writable_dir(directory: str) -> bool:
    """Capability probe: can we create, write and delete files here?"""
    try:
        os.makedirs(directory, exist_ok=True)
        fd, probe_path = tempfile.mkstemp(dir=directory, prefix=".probe-")
        os.close(fd)
        os.unlink(probe_path)
        return True
    except OSError as e:
        logging.debug(f"Storage probe failed for {directory}: {e}")
        return False


def open_storage(group_id: str, shared_root: str, local_root: Optional[str] = None) -> Storage:
    """
    Pick the best storage this process can use.

    Args:
        group_id: Shared namespace both processes agree on
        shared_root: Parent directory of all shared namespaces
        local_root: Process-private directory used when sharing is unavailable

    Returns:
        Storage: Shared file storage, else process-local file storage,
        else in-memory storage
    """
    shared_dir = os.path.join(shared_root, group_id)
    if _is_writable_dir(shared_dir):
        logging.info(f"Using shared storage: {shared_dir}")
        return FileStorage(shared_dir)

    logging.warning(f"Shared storage {shared_dir} unavailable, falling back to process-local storage")
    return open_local_storage(local_root)


def open_local_storage(directory: Optional[str]) -> Storage:
    """File storage in a private directory, or memory if it is not writable."""
    if directory and _is_writable_dir(directory):
        return FileStorage(directory)
    logging.warning(f"Local storage {directory} unavailable, keeping values in memory only")
    return MemoryStorage()


class KeyValueStore:
    """
    Best-effort JSON persistence on top of a Storage.

    Nothing here ever raises: failed writes are dropped and unreadable values
    read as None, so a broken store behaves like an empty one.
    """

    def __init__(self, storage: Storage):
        self.storage = storage

    def save(self, value: Any, key: str) -> None:
        try:
            data = value.to_dict() if isinstance(value, WireModel) else value
            # ASCII output so strings that are not valid UTF-8 stay escaped
            self.storage.save(json.dumps(data), key)
            logging.debug(f"Saved {key}")
        except (PydanticSerializationError, TypeError, ValueError, OSError) as e:
            logging.warning(f"Failed to save {key}: {e}")

    def load(self, key: str, cls: Optional[type] = None) -> Any:
        """
        Load the value under key.

        Args:
            key: Storage key
            cls: Type to validate the JSON into; the raw JSON value is
                returned when omitted

        Returns:
            The decoded value, or None if missing or undecodable
        """
        try:
            text = self.storage.load(key)
            if text is None:
                return None
            data = json.loads(text)
            return wire_adapter(cls).validate_python(data) if cls is not None else data
        except (ValidationError, TypeError, ValueError, OSError) as e:
            logging.debug(f"Ignoring unreadable value for {key}: {e}")
            return None

    def remove(self, key: str) -> None:
        try:
            self.storage.remove(key)
        except OSError as e:
            logging.warning(f"Failed to remove {key}: {e}")


def open_shared_store(group_id: str, shared_root: str, local_root: Optional[str] = None) -> KeyValueStore:
    return KeyValueStore(open_storage(group_id, shared_root, local_root))
