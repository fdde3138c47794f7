"""Text surface protocol, regions, and an in-memory reference surface."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from tagmark.tokens import Tag

TextListener = Callable[[str], None]


@dataclass(eq=False, slots=True)
class Region:
    """A marker over the half-open range [start, end) of a surface's text.

    Regions compare by identity: a region published by one pass is never
    equal to a region published by another, even over the same range.
    """

    start: int
    end: int
    index: int
    owner: object = None
    activatable: bool = False


ActivationHandler = Callable[[Region], None]
RegionFactory = Callable[[Tag, int], Region]


def default_region_factory(tag: Tag, index: int) -> Region:
    return Region(tag.start, tag.end, index)


class TextSurface(Protocol):
    """What a tracker needs from the widget or document that owns the text."""

    def get_text(self) -> str: ...

    def add_text_listener(self, callback: TextListener) -> None: ...

    def set_region(self, region: Region) -> None: ...

    def remove_region(self, region: Region) -> None: ...

    def get_regions(self, owner: object) -> list[Region]: ...


class MemorySurface:
    """In-process text surface with change notification and activation dispatch.

    Regions are not moved by edits; their owners are expected to re-publish
    when notified of the new text.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._regions: list[Region] = []
        self._text_listeners: list[TextListener] = []
        self._activation_handlers: list[ActivationHandler] = []

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def get_text(self) -> str:
        return self._text

    def add_text_listener(self, callback: TextListener) -> None:
        self._text_listeners.append(callback)

    def set_text(self, text: str) -> None:
        """Replace the whole text and notify listeners."""
        self._text = text
        for callback in list(self._text_listeners):
            callback(text)

    def insert(self, offset: int, text: str) -> None:
        if not 0 <= offset <= len(self._text):
            raise IndexError(f"insert offset {offset} outside text of length {len(self._text)}")
        self.set_text(self._text[:offset] + text + self._text[offset:])

    def delete(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"invalid delete range [{start}, {end})")
        self.set_text(self._text[:start] + self._text[end:])

    # ------------------------------------------------------------------
    # Regions
    # ------------------------------------------------------------------

    def set_region(self, region: Region) -> None:
        self._regions.append(region)

    def remove_region(self, region: Region) -> None:
        self._regions = [r for r in self._regions if r is not region]

    def get_regions(self, owner: object = None) -> list[Region]:
        """Return regions belonging to owner, or all regions when owner is None."""
        if owner is None:
            return list(self._regions)
        return [r for r in self._regions if r.owner is owner]

    def region_at(self, offset: int) -> Region | None:
        """Return the first activatable region covering offset, if any."""
        for region in self._regions:
            if region.activatable and region.start <= offset < region.end:
                return region
        return None

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def add_activation_handler(self, handler: ActivationHandler) -> None:
        self._activation_handlers.append(handler)

    def activate(self, region: Region) -> None:
        """Report an activation of region to every handler."""
        if not region.activatable:
            return
        for handler in list(self._activation_handlers):
            handler(region)

    def activate_at(self, offset: int) -> Region | None:
        """Activate the region under offset and return it (None if nothing was hit)."""
        region = self.region_at(offset)
        if region is not None:
            self.activate(region)
        return region
