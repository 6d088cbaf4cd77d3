# src/recipe_auth/storage.py

import json
import logging
import os
import tempfile
import typing
from pathlib import Path

from .errors import CorruptStorageError, StorageError

logger = logging.getLogger(__name__)


class StorageBackend(typing.Protocol):
    def get(self, key: str) -> typing.Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def set_many(self, values: typing.Mapping[str, str]) -> None: ...

    def delete(self, key: str) -> None: ...

    def delete_many(self, keys: typing.Iterable[str]) -> None: ...


class InMemoryStorage:
    """Process-local storage. Nothing survives a restart; used by tests and short-lived clients."""

    def __init__(self, initial: typing.Optional[typing.Dict[str, str]] = None):
        self._data: typing.Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> typing.Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def set_many(self, values: typing.Mapping[str, str]) -> None:
        self._data.update(values)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def delete_many(self, keys: typing.Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> typing.List[str]:
        return list(self._data)


class FileStorage:
    """
    Durable key-value storage kept as a single JSON document on disk.
    Every write replaces the document atomically (temp file + os.replace), so a
    set_many either lands completely or not at all.
    """

    def __init__(self, path: typing.Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> typing.Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Could not read session storage at {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStorageError(f"Session storage at {self.path} is corrupt: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStorageError(f"Session storage at {self.path} is not a JSON object.")
        return data

    def _dump(self, data: typing.Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Could not write session storage at {self.path}: {e}") from e

    def get(self, key: str) -> typing.Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def _load_for_write(self) -> typing.Dict[str, str]:
        # Nothing in an unparseable document can be read back, so a write starts
        # over from an empty one instead of failing forever.
        try:
            return self._load()
        except CorruptStorageError as e:
            logger.warning("Discarding unreadable session storage: %s", e)
            return {}

    def set_many(self, values: typing.Mapping[str, str]) -> None:
        data = self._load_for_write()
        data.update(values)
        self._dump(data)

    def delete(self, key: str) -> None:
        self.delete_many([key])

    def delete_many(self, keys: typing.Iterable[str]) -> None:
        try:
            data = self._load()
        except CorruptStorageError as e:
            logger.warning("Discarding unreadable session storage: %s", e)
            self._dump({})
            return
        present = [key for key in keys if key in data]
        if not present:
            return
        for key in present:
            del data[key]
        self._dump(data)

    def keys(self) -> typing.List[str]:
        return list(self._load())
