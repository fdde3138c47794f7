"""Error types with formatted context."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised on an invalid tag configuration, with the offending config key."""

    def __init__(self, message: str, key: str | None = None) -> None:
        self.message = message
        self.key = key
        super().__init__(self.format())

    def format(self, filename: str = "tagmark.toml") -> str:
        location = f"{filename}: [{self.key}]" if self.key else filename
        return f"error: {self.message}\n  --> {location}"


class AttachError(Exception):
    """Raised when a tracker is bound to a second surface or used before binding."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.format())

    def format(self) -> str:
        return f"error: {self.message}"
