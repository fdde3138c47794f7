"""Region tracker: keeps one region per tag on a text surface."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, auto

from tagmark.errors import AttachError
from tagmark.scanner import scan
from tagmark.surface import Region, RegionFactory, TextSurface, default_region_factory
from tagmark.tokens import DEFAULT_CONFIG, Tag, TagConfig

logger = logging.getLogger(__name__)

ActivationListener = Callable[[str, str], None]


def _trim_bounds(text: str) -> tuple[int, int]:
    """Return [start, end) of text with control characters and spaces trimmed.

    Only code points up to U+0020 count as trimmable; other Unicode
    whitespace such as U+00A0 is kept.
    """
    start, end = 0, len(text)
    while start < end and text[start] <= " ":
        start += 1
    while end > start and text[end - 1] <= " ":
        end -= 1
    return start, end


class TrackerState(Enum):
    UNATTACHED = auto()
    ATTACHED = auto()


class RegionTracker:
    """Re-scan a surface on every text change and publish a region per tag.

    A tracker is bound to exactly one surface for its whole lifetime. Every
    pass removes the regions this tracker published before and replaces them
    wholesale; regions owned by anyone else are left alone.
    """

    def __init__(
        self,
        config: TagConfig = DEFAULT_CONFIG,
        listener: ActivationListener | None = None,
        region_factory: RegionFactory | None = None,
    ) -> None:
        self._config = config
        self._listener = listener
        self._region_factory = region_factory or default_region_factory
        self._surface: TextSurface | None = None
        self._state = TrackerState.UNATTACHED
        self._tags: list[Tag] = []
        self._regions: list[Region] = []

    @property
    def config(self) -> TagConfig:
        return self._config

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def tags(self) -> list[Tag]:
        """Tags found by the latest pass, in offset order."""
        return list(self._tags)

    def attach(self, surface: TextSurface) -> None:
        """Bind to surface and tag its current text."""
        if self._state is TrackerState.ATTACHED:
            raise AttachError(
                "tracker is already attached to a surface; "
                "create a separate tracker for every surface"
            )
        self._surface = surface
        self._state = TrackerState.ATTACHED
        surface.add_text_listener(self.on_text_changed)
        if self._listener is not None and hasattr(surface, "add_activation_handler"):
            surface.add_activation_handler(self.on_activated)
        self.on_text_changed(surface.get_text())

    def on_text_changed(self, text: str) -> None:
        """Drop the previous pass's regions and publish one region per tag in text."""
        if self._surface is None:
            raise AttachError("tracker is not attached to a surface")
        surface = self._surface

        for region in surface.get_regions(self):
            surface.remove_region(region)

        # Scan a trimmed copy, then map offsets back onto the surface text
        lead, trail = _trim_bounds(text)
        tags = [tag.shifted(lead) for tag in scan(text[lead:trail], self._config)]

        regions: list[Region] = []
        for index, tag in enumerate(tags):
            region = self._region_factory(tag, index)
            region.owner = self
            region.activatable = self._listener is not None
            surface.set_region(region)
            regions.append(region)

        self._tags = tags
        self._regions = regions
        logger.debug("published %d tag region(s)", len(regions))

    def list_tokens(self, include_start_char: bool = False) -> list[str]:
        """Return distinct tag texts currently marked on the surface, in order."""
        if self._surface is None:
            return []
        text = self._surface.get_text()
        regions = sorted(self._surface.get_regions(self), key=lambda r: r.start)

        # dict keeps first-seen order and drops duplicates
        seen: dict[str, None] = {}
        for region in regions:
            start = region.start if include_start_char else region.start + 1
            seen.setdefault(text[start : region.end], None)
        return list(seen)

    def on_activated(self, region: Region) -> None:
        """Forward an activated region's tag to the listener.

        Regions from an earlier pass or from another owner are ignored.
        """
        if self._listener is None or region.owner is not self:
            return
        if not any(r is region for r in self._regions):
            logger.debug("ignoring stale region [%d, %d)", region.start, region.end)
            return
        if not 0 <= region.index < len(self._tags):
            return
        tag = self._tags[region.index]
        self._listener(tag.start_char, tag.body)
