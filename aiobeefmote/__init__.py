"""Remote control server for media players, speaking a line based text protocol."""

from .memory import MemoryPlayer
from .models import EventType, PlaybackState, PlayerEvent, PlaylistChange, Track
from .server import RemoteServer

__all__ = [
    "EventType",
    "MemoryPlayer",
    "PlaybackState",
    "PlayerEvent",
    "PlaylistChange",
    "RemoteServer",
    "Track",
]
