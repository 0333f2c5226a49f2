"""Preference records kept in a local JSON file."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from menu_advisor.services.preferences import PreferencesRepository

_logger = logging.getLogger(__name__)


@dataclass
class FilePreferencesRepository(PreferencesRepository):
    """Stores every record as a string value in one JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Write the value for a key, keeping the other records."""
        records = self._read()
        records[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            _logger.warning("Preferences file %s is corrupt, ignoring it", self.path)
            return {}
        return data if isinstance(data, dict) else {}
