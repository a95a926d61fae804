"""Resolved model handed to renderers.

Everything here is immutable. Timing is expressed in divisions: a voice's
bar is ``divisions_per_bar`` divisions long and note positions count from
the start of the voice.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TEMPO = 120
DEFAULT_BEATS = 4
DEFAULT_CHANNEL = 0
DEFAULT_PROGRAM = 0
DEFAULT_OCTAVE = 0
DEFAULT_VOLUME = 1.0

MAX_SOURCE_VOLUME = 127


@dataclass(frozen=True)
class Note:
    midi: int  # 0-127
    length: int  # divisions, > 0
    position: int  # divisions from the start of the voice


@dataclass(frozen=True)
class Voice:
    name: str | None = None
    channel: int = DEFAULT_CHANNEL
    program: int = DEFAULT_PROGRAM
    octave: int = DEFAULT_OCTAVE  # transpose in semitones
    volume: float = DEFAULT_VOLUME  # 0.0-1.0
    drums: bool = False
    divisions_per_bar: int = 1
    notes: tuple[Note, ...] = ()

    @property
    def bar_count(self) -> int:
        """Number of bars spanned by the voice's notes."""
        if not self.notes:
            return 0
        end = max(note.position + note.length for note in self.notes)
        return -(-end // self.divisions_per_bar)


@dataclass(frozen=True)
class Piece:
    title: str | None = None
    composer: str | None = None
    tempo: int = DEFAULT_TEMPO
    beats: int = DEFAULT_BEATS
    voices: tuple[Voice, ...] = ()
