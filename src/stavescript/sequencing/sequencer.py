"""Turn parse trees into resolved pieces.

Each piece is validated as a whole first; only then are its voices
resolved, one at a time and independently of each other.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from stavescript.model import piece as resolved
from stavescript.model import tree
from stavescript.sequencing.resolve import resolve_voice
from stavescript.sequencing.validate import bound_plays, validate_bindings

logger = logging.getLogger(__name__)


def sequence_pieces(
    parse_trees: tree.ParseTree | Iterable[tree.Piece],
) -> list[resolved.Piece]:
    """Validate and resolve every piece.

    Parameters
    ----------
    parse_trees : ParseTree | Iterable[tree.Piece]
        Output of :func:`stavescript.parser.parse`, or its pieces.

    Returns
    -------
    list[Piece]
        One resolved piece per parsed piece, in source order.

    Raises
    ------
    SequencingError
        At the first unbound play or out-of-range note. Nothing is returned
        for pieces resolved before the failure.
    """
    if isinstance(parse_trees, tree.ParseTree):
        parse_trees = parse_trees.pieces
    return [sequence_piece(piece_node) for piece_node in parse_trees]


def sequence_piece(piece_node: tree.Piece) -> resolved.Piece:
    validate_bindings(piece_node)

    voices = tuple(
        resolve_voice(voice_node, bound_plays(piece_node, voice_node))
        for voice_node in piece_node.voices
    )

    logger.debug(
        "Sequenced piece %r with %d voice(s)", piece_node.title, len(voices)
    )

    return resolved.Piece(
        title=piece_node.title,
        composer=piece_node.composer,
        tempo=piece_node.tempo if piece_node.tempo is not None else resolved.DEFAULT_TEMPO,
        beats=piece_node.beats if piece_node.beats is not None else resolved.DEFAULT_BEATS,
        voices=voices,
    )
