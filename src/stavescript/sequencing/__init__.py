"""Sequencing package: validate parse trees and resolve note timing."""

from stavescript.errors import SequencingError
from stavescript.sequencing.resolve import resolve_stave, resolve_voice, voice_divisions
from stavescript.sequencing.sequencer import sequence_piece, sequence_pieces
from stavescript.sequencing.validate import bound_plays, validate_bindings

__all__ = [
    "sequence_pieces",
    "sequence_piece",
    "validate_bindings",
    "bound_plays",
    "resolve_voice",
    "resolve_stave",
    "voice_divisions",
    "SequencingError",
]
