"""Timing conversions between bar lengths, divisions, and MIDI ticks."""

from __future__ import annotations

import math
from collections.abc import Iterable
from functools import reduce


# ---------------------------------------------------------------------------
# Divisions
# ---------------------------------------------------------------------------

def divisions_per_bar(bar_lengths: Iterable[int]) -> int:
    """Smallest bar size that every length in *bar_lengths* divides.

    The fold starts from 1, so no bars at all gives a one-division bar.
    """
    return reduce(math.lcm, bar_lengths, 1)


def bar_scale(divisions: int, bar_length: int) -> int:
    """Factor that stretches a bar of *bar_length* units to *divisions*."""
    scale, remainder = divmod(divisions, bar_length)
    assert remainder == 0, f"{bar_length} does not divide {divisions}"
    return scale


def bar_start(bar_index: int, divisions: int) -> int:
    """Position of the first division of bar *bar_index* (0-based)."""
    return bar_index * divisions


# ---------------------------------------------------------------------------
# Divisions <-> Ticks
# ---------------------------------------------------------------------------

def ticks_per_bar(ppqn: int, beats: int) -> int:
    """Ticks in one bar of *beats* quarter-note beats."""
    return ppqn * beats


def divisions_to_ticks(
    value: int,
    divisions: int,
    beats: int,
    ppqn: int,
) -> int:
    """Convert a position or length in divisions to the nearest tick."""
    return round(value * ticks_per_bar(ppqn, beats) / divisions)

