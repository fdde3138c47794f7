"""Minimal LSP server for tagmark: tag highlighting on cursor activation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DOCUMENT_HIGHLIGHT,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentHighlight,
    DocumentHighlightKind,
    DocumentHighlightParams,
    Position,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from tagmark import __version__
from tagmark.surface import MemorySurface, Region
from tagmark.tokens import DEFAULT_CONFIG, TagConfig
from tagmark.tracker import RegionTracker

logger = logging.getLogger(__name__)


class DocumentTags:
    """A document's text surface together with the tracker attached to it."""

    def __init__(self, uri: str, config: TagConfig) -> None:
        self.uri = uri
        self.surface = MemorySurface()
        self.tracker = RegionTracker(config, listener=self._on_activated)
        self.tracker.attach(self.surface)
        self.last_activation: tuple[str, str] | None = None

    def _on_activated(self, start_char: str, tag: str) -> None:
        self.last_activation = (start_char, tag)
        logger.info("%s: activated %s%s", self.uri, start_char, tag)

    def regions(self) -> list[Region]:
        return sorted(self.surface.get_regions(self.tracker), key=lambda r: r.start)


class TagServer(LanguageServer):
    """Language server keeping one DocumentTags per open document."""

    def __init__(self, *args: Any, tag_config: TagConfig = DEFAULT_CONFIG, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.tag_config = tag_config
        self.documents: dict[str, DocumentTags] = {}


server = TagServer("tagmark-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def offset_at(text: str, position: Position) -> int:
    """Convert a 0-based line/character position into a text offset."""
    lines = text.split("\n")
    if position.line >= len(lines):
        return len(text)
    offset = sum(len(line) + 1 for line in lines[: position.line])
    return offset + min(position.character, len(lines[position.line]))


def position_at(text: str, offset: int) -> Position:
    """Convert a text offset into a 0-based line/character position."""
    line = text.count("\n", 0, offset)
    character = offset - (text.rfind("\n", 0, offset) + 1)
    return Position(line=line, character=character)


def _range(text: str, start: int, end: int) -> Range:
    return Range(start=position_at(text, start), end=position_at(text, end))


def _refresh(ls: TagServer, uri: str) -> None:
    """Push the document's current text into its surface."""
    doc = ls.workspace.get_text_document(uri)
    entry = ls.documents.get(uri)
    if entry is None:
        entry = DocumentTags(uri, ls.tag_config)
        ls.documents[uri] = entry
    entry.surface.set_text(doc.source)


def _highlight(ls: TagServer, uri: str, position: Position) -> list[DocumentHighlight] | None:
    """Activate the tag under position and highlight all its occurrences."""
    entry = ls.documents.get(uri)
    if entry is None:
        return None
    text = entry.surface.get_text()
    offset = offset_at(text, position)

    # A cursor resting just after the tag still counts as on it
    region = entry.surface.region_at(offset)
    if region is None and offset > 0:
        region = entry.surface.region_at(offset - 1)
    if region is None:
        return None
    entry.surface.activate(region)

    target = text[region.start : region.end]
    return [
        DocumentHighlight(range=_range(text, r.start, r.end), kind=DocumentHighlightKind.Text)
        for r in entry.regions()
        if text[r.start : r.end] == target
    ]


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: TagServer, params: DidOpenTextDocumentParams) -> None:
    _refresh(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: TagServer, params: DidChangeTextDocumentParams) -> None:
    _refresh(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: TagServer, params: DidCloseTextDocumentParams) -> None:
    ls.documents.pop(params.text_document.uri, None)


@server.feature(TEXT_DOCUMENT_DOCUMENT_HIGHLIGHT)
def document_highlight(
    ls: TagServer, params: DocumentHighlightParams
) -> list[DocumentHighlight] | None:
    return _highlight(ls, params.text_document.uri, params.position)


def main() -> None:
    from tagmark.cli import load_config, tag_config_from

    server.tag_config = tag_config_from(load_config(None, Path.cwd()))
    server.start_io()
