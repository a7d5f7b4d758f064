from __future__ import annotations
import logging
import uuid
from dataclasses import replace
from typing import List, Optional, Sequence

from app.errors import ConfigurationError, DuplicateModeNameError, InvalidModeError, PersistenceError
from app.modes import DEFAULT_MODE, DEFAULT_MODES, ModeSettings, TypingMode
from app.validation import MAX_MODE_NAME, sanitize_mode_name, validate_settings
from services.floor_generator import check_generation
from services.run_controller import utcnow

log = logging.getLogger(__name__)


class ModeRegistry:
    """
    Built-in modes plus user-defined ones. Names are unique case-insensitively
    across both sets. Store failures are logged and the in-memory list still
    changes, so the session keeps working without persistence.
    """

    def __init__(
        self,
        store=None,
        controller=None,
        words: Optional[Sequence[str]] = None,
        sentences: Optional[Sequence[str]] = None,
        clock=utcnow,
    ):
        self._store = store
        self._controller = controller
        self._words = words
        self._sentences = sentences
        self._clock = clock
        self._custom: List[TypingMode] = self._load()

    def _load(self) -> List[TypingMode]:
        if self._store is None:
            return []
        try:
            stored = list(self._store.load_custom_modes())
        except PersistenceError as e:
            log.warning("Could not load custom modes: %s", e)
            return []

        # stored modes get the same checks as new ones
        kept: List[TypingMode] = []
        seen_ids = {m.id for m in DEFAULT_MODES}
        seen_names = {m.name.casefold() for m in DEFAULT_MODES}
        for mode in stored:
            name = sanitize_mode_name(mode.name)
            if not name or mode.id in seen_ids or name.casefold() in seen_names:
                log.warning("Skipping stored mode %r: missing or duplicate name or id", mode.name)
                continue
            try:
                self._check_settings(mode.settings)
            except ConfigurationError as e:
                log.warning("Skipping stored mode %r: %s", mode.name, e)
                continue
            seen_ids.add(mode.id)
            seen_names.add(name.casefold())
            kept.append(replace(mode, name=name, is_default=False))
        return kept

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save_custom_modes(list(self._custom))
        except PersistenceError as e:
            log.warning("Could not save custom modes: %s", e)

    # -------- queries --------
    @property
    def default_mode(self) -> TypingMode:
        return DEFAULT_MODE

    def all_modes(self) -> List[TypingMode]:
        return list(DEFAULT_MODES) + list(self._custom)

    def custom_modes(self) -> List[TypingMode]:
        return list(self._custom)

    def get(self, mode_id: str) -> TypingMode:
        for m in self.all_modes():
            if m.id == mode_id:
                return m
        raise InvalidModeError(f"Unknown mode id: {mode_id}")

    def _custom_index(self, mode_id: str) -> int:
        for i, m in enumerate(self._custom):
            if m.id == mode_id:
                return i
        if any(m.id == mode_id for m in DEFAULT_MODES):
            raise InvalidModeError("Built-in modes cannot be changed")
        raise InvalidModeError(f"Unknown mode id: {mode_id}")

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        key = name.casefold()
        return any(
            m.name.casefold() == key and m.id != exclude_id for m in self.all_modes()
        )

    # -------- validation --------
    def _clean_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        cleaned = sanitize_mode_name(name)
        if not cleaned:
            raise InvalidModeError("Please enter a mode name")
        if self.name_taken(cleaned, exclude_id):
            raise DuplicateModeNameError(cleaned)
        return cleaned

    def _check_settings(self, settings: ModeSettings) -> None:
        validate_settings(settings)
        check_generation(settings.floor_generation, self._words, self._sentences)

    # -------- mutations --------
    def create_mode(self, name: str, settings: ModeSettings) -> TypingMode:
        cleaned = self._clean_name(name)
        self._check_settings(settings)
        mode = TypingMode(
            id=f"custom-{uuid.uuid4().hex[:12]}",
            name=cleaned,
            settings=settings,
            is_default=False,
            created_at=self._clock().isoformat(),
        )
        self._custom.append(mode)
        self._persist()
        log.info("Created mode %r", cleaned)
        return mode

    def update_mode(
        self,
        mode_id: str,
        name: Optional[str] = None,
        settings: Optional[ModeSettings] = None,
    ) -> TypingMode:
        idx = self._custom_index(mode_id)
        current = self._custom[idx]
        changes = {}
        if name is not None:
            changes["name"] = self._clean_name(name, exclude_id=mode_id)
        if settings is not None:
            self._check_settings(settings)
            changes["settings"] = settings
        updated = replace(current, **changes)
        self._custom[idx] = updated
        self._persist()
        if self._controller is not None:
            self._controller.mode_updated(updated)
        return updated

    def delete_mode(self, mode_id: str) -> None:
        idx = self._custom_index(mode_id)
        removed = self._custom.pop(idx)
        self._persist()
        log.info("Deleted mode %r", removed.name)
        if self._controller is not None:
            self._controller.mode_deleted(mode_id, self.default_mode)

    def duplicate_mode(self, mode: TypingMode) -> TypingMode:
        # suffix must fit inside MAX_MODE_NAME
        base = f"{mode.name[:MAX_MODE_NAME - 12].rstrip()} (Copy)"
        name, n = base, 2
        while self.name_taken(sanitize_mode_name(name)):
            name = f"{base} {n}"
            n += 1
        return self.create_mode(name, mode.settings)
