import json
import os
from pathlib import Path
from typing import Any
from .globals import logger
from .records import utcnow


class SettingsStore:
    """System-wide quota settings kept as a small JSON document in the data directory."""

    def __init__(self, data_dir: str | os.PathLike, total_quota: int, default_quota: int) -> None:
        self.path = Path(data_dir) / "settings.json"
        self.defaults = {"total_quota": total_quota, "default_quota": default_quota}

    def load(self) -> dict[str, Any]:
        settings: dict[str, Any] = {**self.defaults, "last_updated": None}
        if not self.path.exists():
            return settings
        try:
            settings.update(json.loads(self.path.read_text()))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {self.path}, falling back to defaults: {e}")
        return settings

    def save(self, **changes: Any) -> dict[str, Any]:
        settings = self.load()
        settings.update(changes)
        settings["last_updated"] = utcnow().isoformat()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2))
        return settings

    @property
    def default_quota(self) -> int:
        return int(self.load()["default_quota"])
