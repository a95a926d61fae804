"""Per-voice timing resolution.

A voice's bars are all stretched to a common length, ``divisions_per_bar``,
the LCM of every bar length the voice plays. Staves with different
subdivisions (three against two, say) then line up on whole divisions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from stavescript.errors import InvalidNote, SequencingError
from stavescript.model import piece as resolved
from stavescript.model import tree
from stavescript.model.timing import bar_scale, bar_start, divisions_per_bar

logger = logging.getLogger(__name__)

MIDI_MIN = 0
MIDI_MAX = 127


def _staves_with_first_bar(play: tree.Play) -> Iterator[tuple[tree.Stave, int]]:
    """Yield ``(stave, first_bar_index)`` for every stave of *play*.

    Grand staves follow each other: each one starts after the longest
    stave of the one before.
    """
    offset = 0
    for grand_stave in play.grand_staves:
        for stave in grand_stave.staves:
            yield stave, offset
        offset += grand_stave.bar_count


def voice_divisions(plays: list[tree.Play]) -> int:
    """LCM of the length of every non-empty bar in *plays*."""
    return divisions_per_bar(
        bar.length
        for play in plays
        for grand_stave in play.grand_staves
        for stave in grand_stave.staves
        for bar in stave.bars
        if bar.tokens
    )


def resolve_stave(
    stave: tree.Stave,
    first_bar: int,
    divisions: int,
    transpose: int,
) -> list[resolved.Note]:
    """Resolve one stave into positioned notes.

    Extensions lengthen the last note of this stave, across bar lines, until
    a rest or an empty bar intervenes. Extensions with nothing to extend only
    move the cursor. An empty bar is silent but still takes up its bar.
    """
    # [midi, length, position]; ties grow length in place
    pending: list[list[int]] = []
    previous_note = False

    for index, bar in enumerate(stave.bars, start=first_bar):
        if not bar.tokens:
            previous_note = False
            continue
        cursor = bar_start(index, divisions)
        scale = bar_scale(divisions, bar.length)

        for token in bar.tokens:
            length = scale * token.length
            if isinstance(token, tree.Rest):
                previous_note = False
            elif isinstance(token, tree.Extension):
                if previous_note:
                    pending[-1][1] += length
            else:
                midi = token.pitch + transpose
                if not MIDI_MIN <= midi <= MIDI_MAX:
                    raise SequencingError(
                        token.line,
                        token.col,
                        InvalidNote(midi=token.pitch, octave_offset=transpose),
                    )
                pending.append([midi, length, cursor])
                previous_note = True
            cursor += length

    return [
        resolved.Note(midi=midi, length=length, position=position)
        for midi, length, position in pending
    ]


def resolve_voice(voice: tree.Voice, plays: list[tree.Play]) -> resolved.Voice:
    """Resolve *voice* against the *plays* bound to it.

    Separate plays all start at bar 0 and sound together.
    """
    divisions = voice_divisions(plays)
    transpose = voice.transpose if voice.transpose is not None else resolved.DEFAULT_OCTAVE

    notes: list[resolved.Note] = []
    for play in plays:
        for stave, first_bar in _staves_with_first_bar(play):
            notes.extend(resolve_stave(stave, first_bar, divisions, transpose))

    # Stable: simultaneous notes keep stave order
    notes.sort(key=lambda note: note.position)

    logger.debug(
        "Resolved voice %r: %d note(s), %d division(s) per bar",
        voice.name, len(notes), divisions,
    )

    return resolved.Voice(
        name=voice.name,
        channel=voice.channel if voice.channel is not None else resolved.DEFAULT_CHANNEL,
        program=voice.program if voice.program is not None else resolved.DEFAULT_PROGRAM,
        octave=transpose,
        volume=(
            voice.volume / resolved.MAX_SOURCE_VOLUME
            if voice.volume is not None
            else resolved.DEFAULT_VOLUME
        ),
        drums=bool(voice.drums),
        divisions_per_bar=divisions,
        notes=tuple(notes),
    )
