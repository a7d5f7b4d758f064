from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import List, Union

from app.errors import ModeStoreError
from app.modes import TypingMode, mode_from_dict, mode_to_dict

log = logging.getLogger(__name__)

MODES_PATH = Path("data/custom_modes.json")


class JsonModeStore:
    """Custom (user-defined) modes kept as a JSON list on disk."""

    def __init__(self, path: Union[str, Path] = MODES_PATH):
        self.path = Path(path)

    def load_custom_modes(self) -> List[TypingMode]:
        """Malformed files or entries are skipped, never raised."""
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable modes file %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            log.warning("Ignoring modes file %s: expected a list", self.path)
            return []

        modes: List[TypingMode] = []
        for item in data:
            try:
                modes.append(mode_from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                log.warning("Skipping malformed mode entry: %s", e)
        return modes

    def save_custom_modes(self, modes: List[TypingMode]) -> None:
        payload = [mode_to_dict(m) for m in modes]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise ModeStoreError(str(e)) from e
