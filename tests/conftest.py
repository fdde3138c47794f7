"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tagmark.scanner import scan
from tagmark.surface import MemorySurface
from tagmark.tokens import DEFAULT_CONFIG, Tag, TagConfig


@pytest.fixture
def tags():
    """Return a helper that scans text and returns its tags."""

    def _tags(text: str, config: TagConfig = DEFAULT_CONFIG) -> list[Tag]:
        return scan(text, config)

    return _tags


@pytest.fixture
def surface() -> MemorySurface:
    return MemorySurface()


@pytest.fixture
def activations():
    """Return (calls, listener): listener records every (start_char, tag) call."""
    calls: list[tuple[str, str]] = []

    def listener(start_char: str, tag: str) -> None:
        calls.append((start_char, tag))

    return calls, listener


def assert_texts(tags: list[Tag], expected: list[str]) -> None:
    """Assert that the tag texts match the expected list."""
    actual = [t.text for t in tags]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_spans(tags: list[Tag], expected: list[tuple[int, int]]) -> None:
    """Assert that the tag offsets match the expected list."""
    actual = [(t.start, t.end) for t in tags]
    assert actual == expected, f"Expected {expected}, got {actual}"
