"""Command-line interface for tagmark."""

from __future__ import annotations

import argparse
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tagmark.errors import ConfigError
from tagmark.surface import MemorySurface
from tagmark.tokens import TagConfig
from tagmark.tracker import RegionTracker

CONFIG_FILENAME = "tagmark.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    tag_config: TagConfig
    include_start_char: bool
    offsets: bool
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="tagmark",
        description="List the tags (#words) found in a text file",
    )
    p.add_argument("input", help="Input text file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-s",
        "--start",
        metavar="CHARS",
        help="Characters that open a tag (default: #)",
    )
    p.add_argument(
        "-a",
        "--additional",
        metavar="CHARS",
        help="Extra characters allowed inside a tag besides letters and digits",
    )
    p.add_argument(
        "--with-start",
        action="store_true",
        help="Keep the start character in the listed tags",
    )
    p.add_argument(
        "--offsets",
        action="store_true",
        help="Print every tag occurrence as START<TAB>END<TAB>TEXT",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-list")
    p.add_argument("--debug", action="store_true", help="Dump regions to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML: {exc}") from exc


def _chars(value: Any, key: str) -> list[str]:
    """Accept either a string of characters or a list of one-character strings."""
    if isinstance(value, str):
        return list(value)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError("expected a string or a list of characters", key)


def tag_config_from(
    config: dict[str, Any],
    start: str | None = None,
    additional: str | None = None,
) -> TagConfig:
    """Merge the [tags] table of a config file with CLI overrides.

    Precedence: defaults < config file < CLI flags.
    """
    start_chars = ["#"]
    additional_chars: list[str] = []

    cfg_tags = config.get("tags")
    if cfg_tags is not None and not isinstance(cfg_tags, dict):
        raise ConfigError("expected a table", "tags")
    if isinstance(cfg_tags, dict):
        if "start" in cfg_tags:
            start_chars = _chars(cfg_tags["start"], "tags.start")
        if "additional" in cfg_tags:
            additional_chars = _chars(cfg_tags["additional"], "tags.additional")

    if start is not None:
        start_chars = list(start)
    if additional is not None:
        additional_chars = list(additional)

    try:
        return TagConfig(frozenset(start_chars), frozenset(additional_chars))
    except ConfigError as exc:
        # Name the flag when the bad value came from the command line
        flags = {"start": start, "additional": additional}
        if flags.get(exc.key or "") is not None:
            raise ConfigError(exc.message, f"--{exc.key}") from exc
        raise ConfigError(exc.message, f"tags.{exc.key}") from exc


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions."""
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        tag_config=tag_config_from(config, args.start, args.additional),
        include_start_char=args.with_start,
        offsets=args.offsets,
        watch=args.watch,
        debug=args.debug,
    )


def format_tags(surface: MemorySurface, tracker: RegionTracker, options: CliOptions) -> str:
    """Render the tracker's current tags as output text."""
    if options.offsets:
        text = surface.get_text()
        lines = [
            f"{r.start}\t{r.end}\t{text[r.start : r.end]}"
            for r in sorted(surface.get_regions(tracker), key=lambda r: r.start)
        ]
    else:
        lines = tracker.list_tokens(options.include_start_char)
    return "".join(f"{line}\n" for line in lines)


def open_surface(options: CliOptions) -> tuple[MemorySurface, RegionTracker]:
    """Read the input file into a surface with an attached tracker."""
    surface = MemorySurface(options.input_file.read_text(encoding="utf-8"))
    tracker = RegionTracker(options.tag_config)
    tracker.attach(surface)
    return surface, tracker


def tag_file(options: CliOptions) -> str:
    """Read a text file and return its tag listing."""
    from tagmark.debug import dump_regions

    surface, tracker = open_surface(options)
    if options.debug:
        dump_regions(surface)
    return format_tags(surface, tracker, options)


def _write(options: CliOptions, output: str) -> None:
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes and re-list tags on each modification."""
    from tagmark.debug import dump_regions

    surface = MemorySurface()
    tracker = RegionTracker(options.tag_config)
    tracker.attach(surface)

    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    surface.set_text(options.input_file.read_text(encoding="utf-8"))
                except (OSError, UnicodeDecodeError) as exc:
                    print(f"error: cannot read {options.input_file}: {exc}", file=sys.stderr)
                else:
                    if options.debug:
                        dump_regions(surface)
                    _write(options, format_tags(surface, tracker, options))
                    print(f"Scanned {options.input_file}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        if exc.key and exc.key.startswith("--"):
            source = "command line"
        else:
            source = args.config or CONFIG_FILENAME
        print(exc.format(source), file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        output = tag_file(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {options.input_file}: {exc}", file=sys.stderr)
        return 1

    _write(options, output)
    return 0
