"""Tests for calcsheet.buffer module."""

import pytest

from calcsheet.buffer import TextBuffer
from calcsheet.render import LineEdit


class TestText:
    """Tests for text and caret handling."""

    def test_lines(self):
        buf = TextBuffer("a\nb\n")
        assert buf.lines() == ["a", "b", ""]
        assert buf.text == "a\nb\n"

    def test_crlf_kept(self):
        buf = TextBuffer("a\r\nb")
        assert buf.lines() == ["a", "b"]
        assert buf.text == "a\r\nb"

    def test_caret_clamped(self):
        buf = TextBuffer("abc\nd")
        buf.set_caret(5, 10)
        assert buf.caret == (1, 1)
        buf.set_caret(0, -3)
        assert buf.caret == (0, 0)


class TestEdits:
    """Tests for user and engine edits."""

    def test_insert_moves_caret(self):
        buf = TextBuffer("2 + 2")
        buf.set_caret(0, 5)
        buf.insert(" =>")
        assert buf.text == "2 + 2 =>"
        assert buf.caret == (0, 8)

    def test_insert_newline(self):
        buf = TextBuffer("ab")
        buf.set_caret(0, 1)
        buf.insert("x\ny")
        assert buf.lines() == ["ax", "yb"]
        assert buf.caret == (1, 1)

    def test_set_text_with_caret(self):
        buf = TextBuffer("a")
        buf.set_text("a\nbb", caret=(1, 2))
        assert buf.caret == (1, 2)

    def test_replace_lines(self):
        buf = TextBuffer("a\nb\nc")
        buf.replace_lines([LineEdit(0, "a", "A"), LineEdit(2, "c", "C")])
        assert buf.text == "A\nb\nC"
        assert buf.edits == 1

    def test_replace_lines_checks_old_text(self):
        buf = TextBuffer("a")
        with pytest.raises(ValueError, match="changed under the edit"):
            buf.replace_lines([LineEdit(0, "x", "y")])

    def test_empty_replace_is_not_an_edit(self):
        buf = TextBuffer("a")
        buf.replace_lines([])
        assert buf.edits == 0


class TestListeners:
    """Tests for change notifications."""

    def test_notified_once_per_edit(self):
        buf = TextBuffer("a")
        seen = []
        buf.on_change(lambda b: seen.append(b.caret))
        buf.insert("b")
        buf.set_text("xyz", caret=(0, 3))
        assert seen == [(0, 1), (0, 3)]

    def test_unsubscribe(self):
        buf = TextBuffer("a")
        seen = []
        unsubscribe = buf.on_change(lambda b: seen.append(1))
        unsubscribe()
        buf.insert("b")
        assert seen == []
