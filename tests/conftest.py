"""Shared test fixtures for the parse-and-sequence pipeline."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from stavescript.model.piece import Piece
from stavescript.parser import parse
from stavescript.sequencing import sequence_pieces


@pytest.fixture
def sequence() -> Callable[[str], Piece]:
    """Parse and sequence a source, returning its first piece."""

    def _sequence(source: str) -> Piece:
        return sequence_pieces(parse(source))[0]

    return _sequence


@pytest.fixture
def voice_notes(sequence: Callable[[str], Piece]) -> Callable[[str], list[tuple[int, int, int]]]:
    """Notes of the first voice as ``(midi, length, position)`` tuples."""

    def _voice_notes(source: str) -> list[tuple[int, int, int]]:
        voice = sequence(source).voices[0]
        return [(n.midi, n.length, n.position) for n in voice.notes]

    return _voice_notes
