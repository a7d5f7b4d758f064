# app/errors.py


class TypetowerError(Exception):
    """Base class for everything the engine raises on purpose."""


class ConfigurationError(TypetowerError, ValueError):
    """A mode or generation setting was rejected at configuration time."""


class EmptyDictionaryError(ConfigurationError):
    pass


class DuplicateModeNameError(ConfigurationError):
    def __init__(self, name: str):
        super().__init__(f"A mode named '{name}' already exists")
        self.name = name


class InvalidModeError(ConfigurationError):
    pass


class PersistenceError(TypetowerError):
    """A collaborator store failed. Logged by callers, never retried."""


class DatabaseError(PersistenceError):
    pass


class ModeStoreError(PersistenceError):
    pass
