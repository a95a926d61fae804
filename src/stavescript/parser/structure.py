"""Structural parser: recursive descent from source text to a ParseTree.

The grammar is small enough that each rule is one function taking the
shared :class:`Scanner`. The first violation raises :class:`ParseError`;
there is no recovery.
"""

from __future__ import annotations

import logging

from stavescript.errors import ParseError
from stavescript.model.tree import (
    Bar,
    GrandStave,
    ParseTree,
    Piece,
    Play,
    Stave,
    Voice,
)
from stavescript.parser.scanner import Scanner
from stavescript.parser.stave import lex_bar

logger = logging.getLogger(__name__)

# Keywords that end an implicit (top-level) play block; inside braces they
# are ordinary stave prefixes
_BLOCK_KEYWORDS = ("piece", "voice", "play")

_U64 = (0, 2**64 - 1)
_MIDI_7BIT = (0, 127)
_MIDI_CHANNEL = (0, 15)
# Octaves whose semitone transpose still fits a signed byte
_OCTAVE = (-10, 10)


def parse(source: str | bytes) -> ParseTree:
    """Parse *source* into a :class:`ParseTree`.

    Parameters
    ----------
    source : str | bytes
        DSL text; ``bytes`` are decoded as UTF-8.

    Raises
    ------
    ParseError
        At the first syntax violation.
    """
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Source is not valid UTF-8: {exc.reason}") from exc

    scanner = Scanner(source)
    pieces: list[Piece] = []

    scanner.skip_whitespace()
    while True:
        start = scanner.cursor
        pieces.append(_parse_piece(scanner))
        if scanner.finished():
            break
        if scanner.cursor == start:
            raise scanner.error(f"Unexpected `{scanner.peek()}`")

    logger.debug("Parsed %d piece(s)", len(pieces))
    return ParseTree(pieces=pieces)


def _parse_piece(scanner: Scanner) -> Piece:
    line, col = scanner.location()
    if scanner.skip_keyword("piece"):
        scanner.expect("{")
        piece = _parse_piece_contents(scanner, line, col)
        scanner.expect("}")
        return piece
    return _parse_piece_contents(scanner, line, col)


def _parse_piece_contents(scanner: Scanner, line: int, col: int) -> Piece:
    piece = Piece(line=line, col=col)

    while True:
        block_line, block_col = scanner.location()

        if scanner.skip_keyword("play"):
            name = scanner.parse_attr()
            scanner.expect("{")
            play = Play(name=name, line=block_line, col=block_col)
            piece.plays.append(_parse_play_contents(scanner, play))
            scanner.expect("}")
            continue

        if scanner.skip_keyword("voice"):
            name = scanner.parse_attr()
            scanner.expect("{")
            voice = Voice(name=name, line=block_line, col=block_col)
            piece.voices.append(_parse_voice_contents(scanner, voice))
            scanner.expect("}")
            continue

        attr_name = scanner.parse_attr()
        if attr_name is not None:
            scanner.expect(":")
            if scanner.skip_only("|"):
                # A prefixed stave opens the implicit play
                play = Play(line=block_line, col=block_col)
                play.grand_staves.append(
                    _parse_grand_stave(
                        scanner, attr_name, block_line, block_col, implicit=True
                    )
                )
                piece.plays.append(
                    _parse_play_contents(scanner, play, implicit=True)
                )
                continue

            _parse_piece_attribute(scanner, piece, attr_name, block_line, block_col)
            continue

        scanner.skip_whitespace()
        if scanner.finished() or scanner.check("}"):
            break

        # Remaining top-level contents are an anonymous play block
        start = scanner.cursor
        play = _parse_play_contents(
            scanner, Play(line=block_line, col=block_col), implicit=True
        )
        if scanner.cursor == start:
            break
        piece.plays.append(play)

    return piece


def _parse_piece_attribute(
    scanner: Scanner,
    piece: Piece,
    attr_name: str,
    line: int,
    col: int,
) -> None:
    if attr_name == "tempo":
        piece.tempo = scanner.parse_number_only(*_U64)
    elif attr_name == "beats":
        piece.beats = scanner.parse_number_only(*_U64)
    elif attr_name == "title":
        piece.title = scanner.parse_string_only()
    elif attr_name == "composer":
        piece.composer = scanner.parse_string_only()
    else:
        raise ParseError(f"Invalid attribute name `{attr_name}`", line, col)

    scanner.skip_whitespace_in_line()
    ended = (
        scanner.finished()
        or scanner.skip(",")
        or scanner.skip("\n")
        or scanner.skip(";")
        or scanner.check("}")
    )
    if not ended:
        raise scanner.error(
            "Attributes must end with a newline, comma, or semi-colon."
        )


def _parse_voice_contents(scanner: Scanner, voice: Voice) -> Voice:
    while True:
        attr_line, attr_col = scanner.location()
        attr_name = scanner.parse_attr()
        if attr_name is None:
            break
        scanner.expect(":")

        if attr_name == "program":
            voice.program = scanner.parse_number_only(*_MIDI_7BIT)
        elif attr_name == "channel":
            voice.channel = scanner.parse_number_only(*_MIDI_CHANNEL)
        elif attr_name == "octave":
            voice.transpose = scanner.parse_number_only(*_OCTAVE) * 12
        elif attr_name == "volume":
            voice.volume = scanner.parse_number_only(*_MIDI_7BIT)
        elif attr_name == "drums":
            voice.drums = scanner.parse_bool_only()
        else:
            raise ParseError(
                f"Invalid attribute name `{attr_name}`", attr_line, attr_col
            )

        scanner.skip_whitespace_in_line()
        if not (scanner.skip(",") or scanner.skip("\n") or scanner.skip(";")):
            break

    logger.debug("Parsed voice %r", voice.name)
    return voice


def _parse_play_contents(
    scanner: Scanner,
    play: Play,
    implicit: bool = False,
) -> Play:
    """Parse stave introductions into *play* until something else shows up.

    An *implicit* play has no braces and also stops at a block keyword.
    """
    while True:
        if implicit and _at_block_keyword(scanner):
            break

        line, col = scanner.location()
        prefix = scanner.parse_attr()

        if not scanner.skip(":"):
            if prefix is not None:
                raise ParseError(
                    f"Attribute `{prefix}` is missing a value.", line, col
                )
            scanner.skip_whitespace()
            break

        if not scanner.skip_only("|"):
            raise scanner.error(
                "Attributes in play blocks are not supported. "
                "Use `|` to start a stave."
            )
        play.grand_staves.append(
            _parse_grand_stave(scanner, prefix, line, col, implicit)
        )

    logger.debug(
        "Parsed play %r with %d grand stave(s)", play.name, len(play.grand_staves)
    )
    return play


def _parse_grand_stave(
    scanner: Scanner,
    first_prefix: str | None,
    line: int,
    col: int,
    implicit: bool = False,
) -> GrandStave:
    grand_stave = GrandStave()
    grand_stave.staves.append(_parse_stave_contents(scanner, first_prefix, line, col))

    while True:
        if scanner.skip_end_of_stave():
            scanner.skip_whitespace()
            break
        if implicit and _at_block_keyword(scanner):
            break

        line, col = scanner.location()
        prefix = scanner.parse_attr()

        if not scanner.skip(":"):
            if prefix is not None:
                raise ParseError(
                    f"Attribute `{prefix}` is missing a value.", line, col
                )
            break

        if not scanner.skip_only("|"):
            raise scanner.error("Expected `|` to start a stave.")
        grand_stave.staves.append(_parse_stave_contents(scanner, prefix, line, col))

    return grand_stave


def _parse_stave_contents(
    scanner: Scanner,
    prefix: str | None,
    line: int,
    col: int,
) -> Stave:
    """Parse the body of a stave whose opening ``|`` was just consumed.

    The body runs to the end of the line, ``;`` or ``}``. A following line
    that starts with ``|`` continues the same stave.
    """
    stave = Stave(prefix=prefix, line=line, col=col)

    while True:
        _parse_stave_line(scanner, stave)
        scanner.skip_whitespace_in_line()
        if not scanner.skip_only("|"):
            break

    return stave


def _parse_stave_line(scanner: Scanner, stave: Stave) -> None:
    """Split one line of stave text into bars and lex each of them.

    A backslash escapes the character after it, so ``\\|`` does not end a bar.
    """
    bar_start = scanner.cursor

    while True:
        if _at_escape(scanner):
            scanner.cursor += 2
            continue

        at_comment = scanner.check("//")
        at_bar_line = scanner.check("|")
        if at_comment or at_bar_line or _at_end_of_stave(scanner):
            _add_bar(
                scanner, stave, bar_start, scanner.cursor, keep_empty=at_bar_line
            )

        if at_bar_line:
            scanner.cursor += 1
            bar_start = scanner.cursor
            continue
        if at_comment:
            while not scanner.finished() and not scanner.check("\n"):
                scanner.cursor += 1
        if scanner.skip_end_of_stave():
            return
        scanner.cursor += 1


def _at_block_keyword(scanner: Scanner) -> bool:
    return any(scanner.check_keyword(kw) for kw in _BLOCK_KEYWORDS)


def _at_escape(scanner: Scanner) -> bool:
    following = scanner.source[scanner.cursor + 1 : scanner.cursor + 2]
    return scanner.check("\\") and following not in ("", "\n")


def _at_end_of_stave(scanner: Scanner) -> bool:
    return (
        scanner.finished()
        or scanner.check("\n")
        or scanner.check(";")
        or scanner.check("}")
    )


def _add_bar(
    scanner: Scanner,
    stave: Stave,
    start: int,
    end: int,
    keep_empty: bool,
) -> None:
    """Lex one bar into *stave*.

    A bar closed by ``|`` is kept even when empty, so later bars keep their
    index. An empty segment at the end of a line is not a bar.
    """
    line, col = scanner.location(start)
    tokens = lex_bar(scanner.source[start:end], line, col)
    if tokens or keep_empty:
        stave.bars.append(Bar(tokens=tokens, line=line, col=col))
