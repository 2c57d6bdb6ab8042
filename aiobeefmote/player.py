"""
Interfaces of the host media player consumed by the remote control server.

The host owns playback, playlists, metadata and configuration. The server only
talks to it through `PlayerControl` and learns about changes through the
event subscription it offers. Callbacks arrive on threads owned by the host.

Collaborator contract: a `Track` returned by the host is a value snapshot and
stays safe to format after the host drops the underlying item. Handles are
opaque and must be checked with `get_track` before every use.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from .models import EventType, PlaybackState, PlayerEvent, PlaylistView, Track

EventCallBackType = Callable[[PlayerEvent], None]


class PlayerEventListener(Protocol):
    """Receiver of host player events."""

    def on_player_event(self, event: PlayerEvent) -> None:
        """Handle an event emitted by the host (called on a host thread)."""


class PlayerControl(Protocol):
    """Control surface of the host media player."""

    # playlists

    def playlist_count(self) -> int:
        """Return the number of playlists."""

    def current_playlist(self) -> int:
        """Return the (0-based) index of the current playlist, -1 if there is none."""

    def set_current_playlist(self, index: int) -> None:
        """Make the playlist at (0-based) index the current one."""

    def playlist_title(self, index: int) -> str:
        """Return the title of the playlist at (0-based) index."""

    def track_at(
        self,
        playlist: int,
        index: int,
        view: PlaylistView = PlaylistView.MAIN,
    ) -> Track | None:
        """Return the track at (0-based) index in the given view, None past the end."""

    def get_track(self, handle: int) -> Track | None:
        """Resolve an opaque handle, None if it is no longer valid."""

    def index_of(self, handle: int) -> int:
        """Return the main view index of a handle in the current playlist, -1 if absent."""

    def search(self, playlist: int, query: str) -> None:
        """Fill the search view of a playlist with the tracks matching query."""

    def queue_push(self, handle: int) -> None:
        """Append a track to the play queue."""

    def format_duration(self, seconds: float) -> str:
        """Format a duration the way the host displays it."""

    # playback

    def playback_state(self) -> PlaybackState:
        """Return the current playback state."""

    def play_current(self) -> None:
        """Start (or resume) playback of the current track."""

    def play_index(self, index: int) -> None:
        """Play the track at (0-based) main view index of the current playlist."""

    def play_random(self) -> None:
        """Play a random track."""

    def pause(self) -> None:
        """Pause playback."""

    def stop(self) -> None:
        """Stop playback."""

    def previous(self) -> None:
        """Play the previous track."""

    def next(self) -> None:
        """Play the next track."""

    def get_volume_db(self) -> float:
        """Return the volume in dB."""

    def set_volume_db(self, value: float) -> None:
        """Set the volume in dB."""

    def get_position(self) -> float:
        """Return the playback position of the current track in seconds."""

    def set_position(self, value: float) -> None:
        """Seek the current track to the given position in seconds."""

    # configuration and process

    def conf_get_str(self, key: str, default: str = "") -> str:
        """Return a host configuration value."""

    def get_option(self, key: str, default: bool = False) -> bool:
        """Return a persisted boolean option."""

    def set_option(self, key: str, value: bool) -> None:
        """Persist a boolean option."""

    def terminate(self) -> None:
        """Ask the host process to shut down."""

    # events

    def subscribe(
        self,
        cb_func: EventCallBackType,
        event_filter: EventType | tuple[EventType, ...] | None = None,
    ) -> Callable[[], None]:
        """Subscribe to player events, return a function to remove the listener."""
