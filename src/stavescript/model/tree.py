"""Parse-tree nodes produced by the structural parser.

Nodes hold owned strings copied out of the source and 1-based source
positions for everything the sequencer may later report an error on.
Positions are left out of equality, so trees compare by content.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Stave tokens
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Note:
    pitch: int  # MIDI number before voice transposition
    length: int
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Rest:
    length: int
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Extension:
    """Tie: lengthens the previous note of the stave."""

    length: int
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


Token = Note | Rest | Extension


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------

@dataclass
class Bar:
    tokens: list[Token] = field(default_factory=list)
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)

    @property
    def length(self) -> int:
        return sum(token.length for token in self.tokens)


@dataclass
class Stave:
    prefix: str | None = None
    bars: list[Bar] = field(default_factory=list)
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


@dataclass
class GrandStave:
    staves: list[Stave] = field(default_factory=list)

    @property
    def bar_count(self) -> int:
        return max((len(stave.bars) for stave in self.staves), default=0)


@dataclass
class Play:
    name: str | None = None
    grand_staves: list[GrandStave] = field(default_factory=list)
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


@dataclass
class Voice:
    name: str | None = None
    program: int | None = None
    channel: int | None = None
    transpose: int | None = None  # semitones, octave * 12
    volume: int | None = None  # 0-127
    drums: bool | None = None
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


@dataclass
class Piece:
    title: str | None = None
    composer: str | None = None
    tempo: int | None = None
    beats: int | None = None
    voices: list[Voice] = field(default_factory=list)
    plays: list[Play] = field(default_factory=list)
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)


@dataclass
class ParseTree:
    pieces: list[Piece] = field(default_factory=list)
