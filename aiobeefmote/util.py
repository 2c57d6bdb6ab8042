"""Helpers and utils."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Track
    from .player import PlayerControl


def format_duration(seconds: float) -> str:
    """Format a duration as m:ss (h:mm:ss for anything longer than an hour)."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_track(
    player: PlayerControl,
    track: Track,
    with_handle: bool = False,  # noqa: FBT001,FBT002
) -> str:
    """Format a track as "[Tool - Lateralus] 05 - Schism (6:48)"."""
    track_str = "[{} - {}] {} - {} ({})".format(
        track.artist or "?",
        track.album or "?",
        track.track_number or "?",
        track.title or "?",
        player.format_duration(track.duration),
    )
    if with_handle:
        return f"{track.handle:#x} {track_str}"
    return track_str


def parse_index(raw_value: str | None) -> int | None:
    """
    Parse a 1-based index sent by a client.

    Returns None for anything that is not a positive integer.
    """
    if raw_value is None:
        return None
    try:
        index = int(raw_value.strip())
    except ValueError:
        return None
    return index if index > 0 else None


def parse_number(raw_value: str) -> float | None:
    """Parse a (possibly signed or fractional) finite number, None if unparsable."""
    try:
        value = float(raw_value.strip())
    except ValueError:
        return None
    # float() also takes nan and inf
    return value if math.isfinite(value) else None


def parse_handle(raw_value: str) -> int | None:
    """Parse an opaque track handle written in hex notation (0x prefix optional)."""
    try:
        return int(raw_value.strip(), 16)
    except ValueError:
        return None
