"""--debug region dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from tagmark.surface import MemorySurface


def dump_regions(surface: MemorySurface, *, file: TextIO | None = None) -> None:
    """Print every region on *surface* (to stderr by default) with the text it covers."""
    file = file or sys.stderr
    text = surface.get_text()
    regions = surface.get_regions()
    file.write(f"Surface length={len(text)} regions={len(regions)}\n")
    for region in regions:
        owner = type(region.owner).__name__ if region.owner is not None else "-"
        flags = " activatable" if region.activatable else ""
        file.write(
            f"  Region #{region.index} [{region.start}, {region.end}) "
            f"{text[region.start : region.end]!r} owner={owner}{flags}\n"
        )
