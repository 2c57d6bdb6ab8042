"""Models shared by the remote control server and the player host."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import threading
from typing import Any


class EventType(Enum):
    """Enum with possible player events."""

    TRACK_CHANGED = "track_changed"
    PLAYLIST_CHANGED = "playlist_changed"
    CONFIG_CHANGED = "config_changed"


class PlaylistChange(Enum):
    """Kind of change reported with a playlist changed event."""

    CONTENT = "content"
    CREATED = "created"
    DELETED = "deleted"
    POSITION = "position"
    TITLE = "title"
    SELECTION = "selection"
    SEARCH_RESULT = "search_result"


@dataclass
class PlayerEvent:
    """Representation of an Event emitted by the player host."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)


class PlaybackState(Enum):
    """Enum with the possible playback states."""

    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class PlaylistView(Enum):
    """Ordering used to address the tracks of a playlist."""

    MAIN = "main"
    SEARCH = "search"


@dataclass(frozen=True)
class Track:
    """Snapshot of a track in the host's playlists.

    The handle is an opaque reference into the host's data; it can go stale
    at any time and must be resolved through the player before it is used.
    """

    handle: int
    artist: str = ""
    album: str = ""
    title: str = ""
    track_number: str = ""
    duration: float = 0.0


@dataclass(frozen=True)
class ParsedCommand:
    """A single line of client input split into command and argument."""

    command: str
    argument: str | None = None


@dataclass
class ServerState:
    """Mutable state shared by the command handlers and the notification bridge."""

    current_track: int | None = None
    notify_playlist_changed: bool = False
    notify_now_playing: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def reset(self) -> None:
        """Forget everything learned while running."""
        with self.lock:
            self.current_track = None
            self.notify_playlist_changed = False
            self.notify_now_playing = False
