"""
State stores: Infrastructure adapters for the StateStore port.

JsonFileStateStore keeps every key in a single JSON document on disk,
the same shape a browser's localStorage would hold.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from flashdrill.domain.review.ports import StateStore

logger = logging.getLogger(__name__)


class InMemoryStateStore(StateStore):
    """Keeps state in a dict for the life of the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStateStore(StateStore):
    """
    Persists state to a JSON file mapping key -> string value.

    The file is read once and cached; every write rewrites the whole file
    through a temporary file so a crash never leaves it half-written.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._cache: dict[str, str] | None = None

    def _entries(self) -> dict[str, str]:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Unreadable state file {self.path}, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"State file {self.path} is not a JSON object, starting empty")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._entries(), f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._entries().get(key)

    def set(self, key: str, value: str) -> None:
        self._entries()[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if self._entries().pop(key, None) is not None:
            self._write()
