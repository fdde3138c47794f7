"""Tests for the LSP server: document tracking and tag highlighting."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DidCloseTextDocumentParams,
    DocumentHighlightKind,
    Position,
    TextDocumentIdentifier,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.workspace import Workspace

from tagmark.lsp import TagServer, _highlight, _refresh, did_close, offset_at, position_at
from tagmark.tokens import configure

URI = "file:///notes.txt"


@pytest.fixture
def lsp_env():
    """Create a TagServer with an initialized workspace and a document setter."""
    ls = TagServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    def put(source: str, uri: str = URI) -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="plaintext", version=0, text=source)
        )
        _refresh(ls, uri)

    return ls, put


def ranges(highlights) -> list[tuple[int, int, int, int]]:
    return [
        (h.range.start.line, h.range.start.character, h.range.end.line, h.range.end.character)
        for h in highlights
    ]


# ---------------------------------------------------------------------------
# Document tracking
# ---------------------------------------------------------------------------


class TestDocuments:
    def test_open_tags_document(self, lsp_env) -> None:
        ls, put = lsp_env
        put("#alpha and #beta")
        assert ls.documents[URI].tracker.list_tokens() == ["alpha", "beta"]

    def test_change_retags_with_same_tracker(self, lsp_env) -> None:
        ls, put = lsp_env
        put("#alpha")
        tracker = ls.documents[URI].tracker
        put("#gamma")
        assert ls.documents[URI].tracker is tracker
        assert tracker.list_tokens() == ["gamma"]

    def test_close_drops_document(self, lsp_env) -> None:
        ls, put = lsp_env
        put("#alpha")
        did_close(ls, DidCloseTextDocumentParams(text_document=TextDocumentIdentifier(uri=URI)))
        assert URI not in ls.documents

    def test_server_config_used(self, lsp_env) -> None:
        ls, put = lsp_env
        ls.tag_config = configure("@")
        put("#no @yes")
        assert ls.documents[URI].tracker.list_tokens(True) == ["@yes"]


# ---------------------------------------------------------------------------
# Highlight = activation
# ---------------------------------------------------------------------------


class TestHighlight:
    def test_highlights_all_occurrences(self, lsp_env) -> None:
        ls, put = lsp_env
        put("#foo bar #foo #baz")
        result = _highlight(ls, URI, Position(line=0, character=2))
        assert ranges(result) == [(0, 0, 0, 4), (0, 9, 0, 13)]
        assert all(h.kind == DocumentHighlightKind.Text for h in result)

    def test_activation_reported(self, lsp_env) -> None:
        ls, put = lsp_env
        put("see #foo")
        _highlight(ls, URI, Position(line=0, character=5))
        assert ls.documents[URI].last_activation == ("#", "foo")

    def test_cursor_after_tag(self, lsp_env) -> None:
        ls, put = lsp_env
        put("#foo bar")
        result = _highlight(ls, URI, Position(line=0, character=4))
        assert ranges(result) == [(0, 0, 0, 4)]

    def test_no_tag_under_cursor(self, lsp_env) -> None:
        ls, put = lsp_env
        put("#foo plain words")
        assert _highlight(ls, URI, Position(line=0, character=10)) is None
        assert ls.documents[URI].last_activation is None

    def test_multiline(self, lsp_env) -> None:
        ls, put = lsp_env
        put("first line\n  #todo here\n#todo")
        result = _highlight(ls, URI, Position(line=1, character=3))
        assert ranges(result) == [(1, 2, 1, 7), (2, 0, 2, 5)]

    def test_unknown_document(self, lsp_env) -> None:
        ls, _ = lsp_env
        assert _highlight(ls, "file:///other.txt", Position(line=0, character=0)) is None


# ---------------------------------------------------------------------------
# Position conversion
# ---------------------------------------------------------------------------


class TestPositionConversion:
    def test_offset_at(self) -> None:
        text = "ab\ncd"
        assert offset_at(text, Position(line=0, character=1)) == 1
        assert offset_at(text, Position(line=1, character=0)) == 3
        assert offset_at(text, Position(line=1, character=9)) == 5

    def test_offset_past_last_line(self) -> None:
        assert offset_at("ab", Position(line=4, character=0)) == 2

    def test_position_at(self) -> None:
        text = "ab\ncd"
        assert position_at(text, 0) == Position(line=0, character=0)
        assert position_at(text, 4) == Position(line=1, character=1)
