"""Stave-body lexer: converts the text of one bar into note tokens.

Supported tokens
----------------
- Note: letter, modifiers, optional length: ``C``, ``g^'``, ``B_,2``
- Rest: ``-`` with optional length: ``-``, ``-3``
- Extension (tie): ``.`` with optional length: ``.``, ``.8``

A backslash and the character after it are skipped, like whitespace.

Uppercase ``C`` is middle C (MIDI 60); ``A`` and ``B`` sit just below it.
Lowercase letters are an octave higher. Modifiers follow the letter:
``^`` or ``#`` sharpen, ``_`` flattens, ``=`` is a natural, ``'`` raises an
octave and ``,`` lowers one.
"""

from __future__ import annotations

import re

from stavescript.errors import ParseError
from stavescript.model.tree import Extension, Note, Rest, Token

# MIDI numbers for the uppercase letters
_NOTE_PITCHES: dict[str, int] = {
    "A": 57,
    "B": 59,
    "C": 60,
    "D": 62,
    "E": 64,
    "F": 65,
    "G": 67,
}

# Modifier offsets in semitones
_MODIFIER_OFFSETS: dict[str, int] = {
    "^": 1,
    "#": 1,
    "_": -1,
    "=": 0,
    "'": 12,
    ",": -12,
}

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<escape>\\[^\n])
    | (?P<note>[A-Ga-g])(?P<modifiers>[\^\#_=',]*)(?P<note_length>\d*)
    | -(?P<rest_length>\d*)
    | \.(?P<extension_length>\d*)
    """,
    re.VERBOSE,
)


def lex_bar(text: str, line: int = 1, col: int = 1) -> list[Token]:
    """Lex the text of a single bar into tokens.

    Parameters
    ----------
    text : str
        Bar contents without the surrounding ``|`` delimiters.
    line, col : int
        Source position of ``text[0]``, used for token positions and errors.

    Returns
    -------
    list[Token]

    Raises
    ------
    ParseError
        On an unknown character, a zero length, or a pitch outside 0-127.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise ParseError(
                f"Unexpected `{text[pos]}` in stave", line, col + pos
            )
        token_col = col + pos
        pos = m.end()

        if m.group("space") or m.group("escape"):
            continue
        if m.group("note"):
            tokens.append(Note(
                pitch=_pitch(m.group("note"), m.group("modifiers"), line, token_col),
                length=_length(m.group("note_length"), line, token_col),
                line=line,
                col=token_col,
            ))
        elif m.group("rest_length") is not None:
            tokens.append(Rest(
                length=_length(m.group("rest_length"), line, token_col),
                line=line,
                col=token_col,
            ))
        else:
            tokens.append(Extension(
                length=_length(m.group("extension_length"), line, token_col),
                line=line,
                col=token_col,
            ))

    return tokens


def _pitch(letter: str, modifiers: str, line: int, col: int) -> int:
    pitch = _NOTE_PITCHES[letter.upper()]
    if letter.islower():
        pitch += 12
    pitch += sum(_MODIFIER_OFFSETS[ch] for ch in modifiers)

    if pitch < 0 or pitch > 127:
        raise ParseError(
            f"Note `{letter}{modifiers}` is outside the MIDI range (0-127)",
            line,
            col,
        )
    return pitch


def _length(digits: str, line: int, col: int) -> int:
    if not digits:
        return 1
    length = int(digits)
    if length == 0:
        raise ParseError("Length must be greater than zero", line, col)
    return length
