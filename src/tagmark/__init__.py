"""Tag detection and region tracking for editable text."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from tagmark.tokens import configure

if TYPE_CHECKING:
    from tagmark.surface import RegionFactory
    from tagmark.tokens import TagConfig
    from tagmark.tracker import RegionTracker

__version__ = "0.1.0"

__all__ = ["configure", "create_tracker", "find_tags"]


def create_tracker(
    config: TagConfig | None = None,
    listener: Callable[[str, str], None] | None = None,
    region_factory: RegionFactory | None = None,
) -> RegionTracker:
    """Create an unattached tracker for a single text surface."""
    from tagmark.tokens import DEFAULT_CONFIG
    from tagmark.tracker import RegionTracker

    return RegionTracker(config or DEFAULT_CONFIG, listener, region_factory)


def find_tags(
    text: str,
    config: TagConfig | None = None,
    include_start_char: bool = True,
) -> list[str]:
    """Return the distinct tags in text, in order of first appearance."""
    from tagmark.surface import MemorySurface

    tracker = create_tracker(config)
    tracker.attach(MemorySurface(text))
    return tracker.list_tokens(include_start_char)
