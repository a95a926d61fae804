"""Build a mido.MidiFile from a resolved Piece.

Usage::

    from stavescript.serialization.midi import piece_to_midi

    piece_to_midi(piece).save("/path/to/output.mid")

The file is type 1: a conductor track carrying title, tempo and time
signature, then one track per voice. Every track runs to the end of its
last bar.
"""

from __future__ import annotations

import mido

from stavescript.errors import SerializationError
from stavescript.model.piece import Piece, Voice
from stavescript.model.timing import divisions_to_ticks, ticks_per_bar

DRUM_CHANNEL = 9
VOLUME_CC = 7

# set_tempo stores microseconds per beat in 24 bits
MIN_TEMPO = 4
# time_signature stores the numerator in one byte
MAX_BEATS = 255


def piece_to_midi(
    piece: Piece,
    ppqn: int = 480,
    velocity: int = 100,
) -> mido.MidiFile:
    """Convert a :class:`Piece` to a :class:`mido.MidiFile`.

    A bar is ``piece.beats`` quarter notes long; note positions and lengths
    are rounded to the nearest tick.

    Raises
    ------
    SerializationError
        If the tempo is below 4 bpm or beats are outside 1-255.
    """
    if piece.tempo < MIN_TEMPO:
        raise SerializationError(
            f"Tempo {piece.tempo} is below the MIDI minimum of {MIN_TEMPO} bpm"
        )
    if not 1 <= piece.beats <= MAX_BEATS:
        raise SerializationError(
            f"Beats {piece.beats} out of range (1-{MAX_BEATS})"
        )

    midi_file = mido.MidiFile(ticks_per_beat=ppqn, type=1)

    conductor = mido.MidiTrack()
    if piece.title is not None:
        conductor.append(mido.MetaMessage("track_name", name=piece.title, time=0))
    if piece.composer is not None:
        conductor.append(mido.MetaMessage("copyright", text=piece.composer, time=0))
    conductor.append(
        mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(piece.tempo), time=0)
    )
    conductor.append(
        mido.MetaMessage(
            "time_signature", numerator=piece.beats, denominator=4, time=0
        )
    )
    bars = max((voice.bar_count for voice in piece.voices), default=0)
    conductor.append(
        mido.MetaMessage("end_of_track", time=bars * ticks_per_bar(ppqn, piece.beats))
    )
    midi_file.tracks.append(conductor)

    for voice in piece.voices:
        midi_file.tracks.append(
            voice_to_track(voice, piece.beats, ppqn, velocity)
        )

    return midi_file


def voice_to_track(
    voice: Voice,
    beats: int,
    ppqn: int,
    velocity: int = 100,
) -> mido.MidiTrack:
    channel = DRUM_CHANNEL if voice.drums else voice.channel
    track = mido.MidiTrack()
    if voice.name is not None:
        track.append(mido.MetaMessage("track_name", name=voice.name, time=0))
    track.append(
        mido.Message("program_change", channel=channel, program=voice.program, time=0)
    )
    track.append(
        mido.Message(
            "control_change",
            channel=channel,
            control=VOLUME_CC,
            value=round(voice.volume * 127),
            time=0,
        )
    )

    def ticks(divisions: int) -> int:
        return divisions_to_ticks(divisions, voice.divisions_per_bar, beats, ppqn)

    # (tick, is_on, note): note_off sorts before note_on so repeated pitches retrigger
    events: list[tuple[int, bool, int]] = []
    for note in voice.notes:
        events.append((ticks(note.position), True, note.midi))
        events.append((ticks(note.position + note.length), False, note.midi))
    events.sort(key=lambda event: (event[0], event[1]))

    prev = 0
    for tick, is_on, note in events:
        track.append(mido.Message(
            "note_on" if is_on else "note_off",
            channel=channel,
            note=note,
            velocity=velocity if is_on else 0,
            time=tick - prev,
        ))
        prev = tick

    end = voice.bar_count * voice.divisions_per_bar
    track.append(mido.MetaMessage("end_of_track", time=ticks(end) - prev))
    return track
