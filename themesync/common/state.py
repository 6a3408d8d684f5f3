"""
Persistent Key-Value Store

File-based string storage used by the theme cache. Each key maps to one
file under the state directory; writes go to a temp file and are renamed
into place so a reader never sees a half-written value.
"""

import os
import threading
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

# Default state directory - will be created if it doesn't exist
STATE_DIR = Path(os.environ.get("THEMESYNC_STATE_DIR", "/var/lib/themesync/state"))


class PersistentStore(Protocol):
    """Key-value string store addressed by fixed keys"""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class FileStore:
    """
    Simple file-based store.

    Values are stored verbatim as UTF-8 text in `<state_dir>/<quoted key>.json`.
    Read/write errors propagate to the caller.
    """

    def __init__(self, state_dir: Path | str | None = None):
        self.state_dir = Path(state_dir) if state_dir else STATE_DIR
        self._lock = threading.Lock()

    def _ensure_dir(self) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Get file path for a key; percent-encoding keeps distinct keys apart"""
        return self.state_dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._ensure_dir()
        path = self.path_for(key)
        temp_path = path.with_suffix(".tmp")

        with self._lock:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(path)


class MemoryStore:
    """In-process store for tests and ephemeral clients"""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
