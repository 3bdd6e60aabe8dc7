import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class LocalSessionStore:
    """Single string-keyed slot in a JSON file holding the current identity."""

    def __init__(self, path, key: str = "current-user"):
        self.path = Path(path)
        self.key = key

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def read(self) -> Optional[dict]:
        value = self._load().get(self.key)
        if not value:
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("Discarding corrupt session slot '%s'", self.key)
            return None

    def write(self, identity: dict) -> None:
        data = self._load()
        data[self.key] = json.dumps(identity, default=str)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def clear(self) -> None:
        data = self._load()
        if self.key not in data:
            return
        del data[self.key]
        self.path.write_text(json.dumps(data), encoding="utf-8")
