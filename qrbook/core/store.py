"""
Credential storage backends.

The store is a flat string key/value map, like browser local storage:
- `token`: the raw bearer token
- `user`:  JSON text of the login response
"""

from __future__ import annotations

import json
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

TOKEN_KEY = "token"
USER_KEY = "user"

logger = logging.getLogger(__name__)


class CredentialStoreError(RuntimeError):
    pass


class CredentialStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


class MemoryCredentialStore(CredentialStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class FileCredentialStore(CredentialStore):
    """
    JSON-file backed store that survives process restarts.

    Every write replaces the file atomically; an unreadable file is treated
    as an empty store.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("credential_store_unreadable path=%s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, delete=False, encoding="utf-8"
        ) as tf:
            json.dump(data, tf, indent=2, ensure_ascii=False)
            temp_path = Path(tf.name)

        try:
            shutil.move(str(temp_path), str(self.path))
        except OSError as exc:
            if temp_path.exists():
                temp_path.unlink()
            raise CredentialStoreError(f"Failed to save credentials to {self.path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def clear(self) -> None:
        if self.path.exists():
            self._save({})


def build_store(path: str | None) -> CredentialStore:
    if path:
        return FileCredentialStore(path)
    return MemoryCredentialStore()
