"""Tag configuration, tag records, and character classification helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from tagmark.errors import ConfigError

# Characters that may never directly follow a start character
FORBIDDEN_CHARS = frozenset("\n\r ")


def _char_set(chars: Iterable[str], key: str) -> frozenset[str]:
    result = frozenset(chars)
    for ch in result:
        if not isinstance(ch, str) or len(ch) != 1:
            raise ConfigError(f"expected single characters, got {ch!r}", key)
    return result


@dataclass(frozen=True, slots=True)
class TagConfig:
    """Which characters open a tag and which may appear in its body."""

    start_chars: frozenset[str] = frozenset("#")
    additional_chars: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Accept any iterable of characters (including a plain string)
        object.__setattr__(self, "start_chars", _char_set(self.start_chars, "start"))
        object.__setattr__(
            self, "additional_chars", _char_set(self.additional_chars, "additional")
        )
        if not self.start_chars:
            raise ConfigError("at least one start character is required", "start")

    @property
    def forbidden_chars(self) -> frozenset[str]:
        return FORBIDDEN_CHARS

    def is_body_char(self, ch: str) -> bool:
        """Return True if ch may continue a tag body."""
        if ch in self.start_chars:
            return False
        return ch.isalpha() or ch.isdecimal() or ch in self.additional_chars

    def opens_tag(self, sign: str, next_sign: str) -> bool:
        """Return True if sign followed by next_sign starts a tag."""
        return (
            sign in self.start_chars
            and next_sign not in self.start_chars
            and next_sign not in FORBIDDEN_CHARS
        )


DEFAULT_CONFIG = TagConfig()


def configure(
    start_chars: Iterable[str] | None = None,
    additional_chars: Iterable[str] | None = None,
) -> TagConfig:
    """Build a TagConfig, falling back to '#' and no extra body characters."""
    return TagConfig(
        start_chars=frozenset("#") if start_chars is None else start_chars,
        additional_chars=frozenset() if additional_chars is None else additional_chars,
    )


@dataclass(frozen=True, slots=True)
class Tag:
    """A detected tag: half-open offsets into the scanned text."""

    start: int
    end: int
    start_char: str
    text: str

    @property
    def body(self) -> str:
        """Tag text without its start character."""
        return self.text[1:]

    def shifted(self, delta: int) -> Tag:
        return Tag(self.start + delta, self.end + delta, self.start_char, self.text)
