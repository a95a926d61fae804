"""Whole-piece binding validation, run before any timing work."""

from __future__ import annotations

from stavescript.errors import SequencingError, UndeclaredVoice, VoicelessPlayBlock
from stavescript.model import tree


def bound_plays(piece: tree.Piece, voice: tree.Voice) -> list[tree.Play]:
    """Plays of *piece* that feed *voice*, in source order.

    Names match exactly; an anonymous play binds to an anonymous voice.
    """
    return [play for play in piece.plays if play.name == voice.name]


def validate_bindings(piece: tree.Piece) -> None:
    """Check that every play of *piece* names a declared voice.

    Raises
    ------
    SequencingError
        ``VoicelessPlayBlock`` for an anonymous play with no anonymous voice,
        ``UndeclaredVoice`` for a named play with no voice of that name.
    """
    declared = {voice.name for voice in piece.voices}
    for play in piece.plays:
        if play.name in declared:
            continue
        if play.name is None:
            raise SequencingError(play.line, play.col, VoicelessPlayBlock())
        raise SequencingError(play.line, play.col, UndeclaredVoice(play.name))
