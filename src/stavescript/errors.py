"""Custom exception hierarchy for stavescript."""

from __future__ import annotations

from dataclasses import dataclass


class StaveScriptError(Exception):
    """Base exception for all stavescript errors."""


class ParseError(StaveScriptError, ValueError):
    """Structural or lexical violation in the source text.

    Subclasses ValueError so callers treating bad input generically can keep
    using ``except ValueError``.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0) -> None:
        self.message = message
        self.line = line
        self.col = col
        super().__init__(f"{line}:{col}: {message}" if line else message)


# ---------------------------------------------------------------------------
# Sequencing error kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UndeclaredVoice:
    name: str

    def describe(self) -> str:
        return f"Play block refers to undeclared voice `{self.name}`"


@dataclass(frozen=True)
class VoicelessPlayBlock:
    def describe(self) -> str:
        return "Play block has no name and there is no anonymous voice"


@dataclass(frozen=True)
class InvalidNote:
    midi: int
    octave_offset: int  # semitones

    def describe(self) -> str:
        return (
            f"Note {self.midi} transposed by {self.octave_offset:+d} "
            f"semitones is outside the MIDI range (0-127)"
        )


ErrorKind = UndeclaredVoice | VoicelessPlayBlock | InvalidNote


class SequencingError(StaveScriptError):
    """Semantic violation found while resolving a parse tree."""

    def __init__(self, line: int, col: int, kind: ErrorKind) -> None:
        self.line = line
        self.col = col
        self.kind = kind
        super().__init__(f"{line}:{col}: {kind.describe()}")


class SerializationError(StaveScriptError):
    """Resolved piece cannot be expressed in the output format."""
