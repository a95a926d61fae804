"""Tests for the stave-body lexer."""

from __future__ import annotations

import pytest

from stavescript.errors import ParseError
from stavescript.model.tree import Extension, Note, Rest
from stavescript.parser.stave import lex_bar


class TestPitches:
    @pytest.mark.parametrize(
        "text, midi",
        [
            ("A", 57),
            ("B", 59),
            ("C", 60),
            ("D", 62),
            ("E", 64),
            ("F", 65),
            ("G", 67),
            ("c", 72),
            ("g", 79),
            ("a", 69),
        ],
    )
    def test_letters(self, text, midi):
        assert lex_bar(text) == [Note(pitch=midi, length=1)]

    def test_sharp(self):
        assert lex_bar("C^")[0].pitch == 61
        assert lex_bar("C#")[0].pitch == 61

    def test_flat(self):
        assert lex_bar("E_")[0].pitch == 63

    def test_natural(self):
        assert lex_bar("F=")[0].pitch == 65

    def test_octave_marks(self):
        assert lex_bar("c'")[0].pitch == 84
        assert lex_bar("C,,")[0].pitch == 36

    def test_combined_modifiers(self):
        # g sharp, three octaves up
        assert lex_bar("g^'''")[0].pitch == 116

    def test_out_of_range(self):
        with pytest.raises(ParseError, match="outside the MIDI range"):
            lex_bar("c''''''")


class TestLengths:
    def test_note_length(self):
        assert lex_bar("C4") == [Note(pitch=60, length=4)]

    def test_rest(self):
        assert lex_bar("-") == [Rest(length=1)]
        assert lex_bar("-2") == [Rest(length=2)]

    def test_extension(self):
        assert lex_bar(".") == [Extension(length=1)]
        assert lex_bar(".8") == [Extension(length=8)]

    def test_zero_length(self):
        with pytest.raises(ParseError, match="greater than zero"):
            lex_bar("C0")


class TestSequences:
    def test_no_whitespace_needed(self):
        assert lex_bar("CEG.") == [
            Note(pitch=60, length=1),
            Note(pitch=64, length=1),
            Note(pitch=67, length=1),
            Extension(length=1),
        ]

    def test_mixed(self):
        assert lex_bar(" C4 -2 G2 ") == [
            Note(pitch=60, length=4),
            Rest(length=2),
            Note(pitch=67, length=2),
        ]

    def test_dots(self):
        assert lex_bar("A..B") == [
            Note(pitch=57, length=1),
            Extension(length=1),
            Extension(length=1),
            Note(pitch=59, length=1),
        ]

    def test_blank_bar(self):
        assert lex_bar("   ") == []

    def test_escape_is_skipped(self):
        assert lex_bar(r"C \| D") == [
            Note(pitch=60, length=1),
            Note(pitch=62, length=1),
        ]

    def test_trailing_backslash(self):
        with pytest.raises(ParseError, match="Unexpected"):
            lex_bar("C \\")


class TestPositions:
    def test_token_columns(self):
        tokens = lex_bar(" C  -", line=3, col=10)
        assert [(t.line, t.col) for t in tokens] == [(3, 11), (3, 14)]

    def test_error_column(self):
        with pytest.raises(ParseError) as exc_info:
            lex_bar("C ?", line=2, col=5)
        assert (exc_info.value.line, exc_info.value.col) == (2, 7)
