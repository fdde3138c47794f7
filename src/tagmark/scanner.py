"""Tag scanner: finds tags in a text snapshot in a single left-to-right pass."""

from __future__ import annotations

from tagmark.tokens import DEFAULT_CONFIG, Tag, TagConfig


class Scanner:
    """Scan text into an ordered list of non-overlapping Tag objects.

    The scanner never fails: any text is valid input, and text shorter than
    two characters cannot hold a tag.
    """

    def __init__(self, text: str, config: TagConfig = DEFAULT_CONFIG) -> None:
        self._text = text
        self._config = config
        self._pos = 0
        self._tags: list[Tag] = []

    def scan(self) -> list[Tag]:
        """Scan the full text and return the tag list."""
        # A start character in the last position is never considered
        while self._pos < len(self._text) - 1:
            sign = self._text[self._pos]
            if self._config.opens_tag(sign, self._text[self._pos + 1]):
                self._pos = self._scan_tag(sign)
            else:
                self._pos += 1
        return self._tags

    def _scan_tag(self, sign: str) -> int:
        """Emit the tag starting at the cursor and return its end offset."""
        start = self._pos
        end = self._find_body_end(start + 1)
        self._tags.append(Tag(start, end, sign, self._text[start:end]))
        return end

    def _find_body_end(self, index: int) -> int:
        while index < len(self._text) and self._config.is_body_char(self._text[index]):
            index += 1
        return index


def scan(text: str, config: TagConfig = DEFAULT_CONFIG) -> list[Tag]:
    """Convenience function: scan text and return its tags."""
    return Scanner(text, config).scan()
