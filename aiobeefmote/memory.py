"""
In-memory player host.

Implements the `PlayerControl` interface and the player event source without
any audio backend. Used by the example host and the tests; events are
delivered synchronously on whatever thread caused the change, like a real
host delivering them on its own threads.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import itertools
import logging
import random
import threading
from typing import Any

from .models import (
    EventType,
    PlaybackState,
    PlayerEvent,
    PlaylistChange,
    PlaylistView,
    Track,
)
from .player import EventCallBackType
from .util import format_duration

EventSubscriptionType = tuple[EventCallBackType, tuple[EventType, ...]]

VOLUME_MIN_DB = -50.0
VOLUME_MAX_DB = 0.0


@dataclass
class MemoryPlaylist:
    """A playlist of the in-memory host."""

    title: str
    tracks: list[Track] = field(default_factory=list)
    search_result: list[Track] = field(default_factory=list)


class MemoryPlayer:
    """Player host keeping its playlists, playback state and config in memory."""

    def __init__(self, config: dict[str, str] | None = None) -> None:
        """Initialize an empty player."""
        self.logger = logging.getLogger(__name__)
        self.config: dict[str, str] = dict(config or {})
        self.options: dict[str, bool] = {}
        self.playlists: list[MemoryPlaylist] = []
        self.queue: list[int] = []
        self.terminated = threading.Event()
        self.on_terminate: Callable[[], None] | None = None
        self._lock = threading.RLock()
        self._subscribers: list[EventSubscriptionType] = []
        self._handles = itertools.count(0x55D0C0DE0000, 0x40)
        self._current_playlist = -1
        self._current_track: Track | None = None
        self._state = PlaybackState.STOPPED
        self._volume_db = VOLUME_MAX_DB
        self._position = 0.0

    # building the library

    def add_playlist(self, title: str, tracks: Iterable[dict[str, Any]] = ()) -> int:
        """Add a playlist, return its (0-based) index."""
        with self._lock:
            playlist = MemoryPlaylist(title)
            self.playlists.append(playlist)
            index = len(self.playlists) - 1
            if self._current_playlist < 0:
                self._current_playlist = index
        for track in tracks:
            self.add_track(index, **track)
        return index

    def add_track(
        self,
        playlist: int,
        artist: str = "",
        album: str = "",
        title: str = "",
        track_number: str = "",
        duration: float = 0.0,
    ) -> Track:
        """Append a track to a playlist."""
        with self._lock:
            track = Track(
                handle=next(self._handles),
                artist=artist,
                album=album,
                title=title,
                track_number=track_number,
                duration=duration,
            )
            self.playlists[playlist].tracks.append(track)
        self._signal_playlist_changed(PlaylistChange.CONTENT)
        return track

    def remove_track(self, handle: int) -> None:
        """Remove a track from its playlist, invalidating its handle."""
        with self._lock:
            for playlist in self.playlists:
                playlist.tracks = [x for x in playlist.tracks if x.handle != handle]
                playlist.search_result = [
                    x for x in playlist.search_result if x.handle != handle
                ]
            self.queue = [x for x in self.queue if x != handle]
        self._signal_playlist_changed(PlaylistChange.CONTENT)

    # playlists

    def playlist_count(self) -> int:
        """Return the number of playlists."""
        with self._lock:
            return len(self.playlists)

    def current_playlist(self) -> int:
        """Return the index of the current playlist."""
        with self._lock:
            return self._current_playlist

    def set_current_playlist(self, index: int) -> None:
        """Make another playlist the current one."""
        with self._lock:
            if not 0 <= index < len(self.playlists):
                return
            self._current_playlist = index
        self._signal_playlist_changed(PlaylistChange.SELECTION)

    def playlist_title(self, index: int) -> str:
        """Return the title of a playlist."""
        with self._lock:
            return self.playlists[index].title

    def track_at(
        self,
        playlist: int,
        index: int,
        view: PlaylistView = PlaylistView.MAIN,
    ) -> Track | None:
        """Return the track at index in the given view."""
        with self._lock:
            if not 0 <= playlist < len(self.playlists) or index < 0:
                return None
            items = self.playlists[playlist]
            tracks = items.tracks if view == PlaylistView.MAIN else items.search_result
            return tracks[index] if index < len(tracks) else None

    def get_track(self, handle: int) -> Track | None:
        """Resolve a handle, None when it no longer exists."""
        with self._lock:
            for playlist in self.playlists:
                for track in playlist.tracks:
                    if track.handle == handle:
                        return track
        return None

    def index_of(self, handle: int) -> int:
        """Return the index of a handle in the current playlist."""
        with self._lock:
            if self._current_playlist < 0:
                return -1
            for index, track in enumerate(self.playlists[self._current_playlist].tracks):
                if track.handle == handle:
                    return index
        return -1

    def search(self, playlist: int, query: str) -> None:
        """Case insensitive substring search over artist, album and title."""
        needle = query.lower()
        with self._lock:
            items = self.playlists[playlist]
            items.search_result = [
                track
                for track in items.tracks
                if any(
                    needle in value.lower()
                    for value in (track.artist, track.album, track.title)
                )
            ]
        self._signal_playlist_changed(PlaylistChange.SEARCH_RESULT)

    def queue_push(self, handle: int) -> None:
        """Append a track to the play queue."""
        with self._lock:
            self.queue.append(handle)

    def format_duration(self, seconds: float) -> str:
        """Format a duration."""
        return format_duration(seconds)

    # playback

    @property
    def current_track(self) -> Track | None:
        """Return the track being played."""
        with self._lock:
            return self._current_track

    def playback_state(self) -> PlaybackState:
        """Return the playback state."""
        with self._lock:
            return self._state

    def play_current(self) -> None:
        """Resume playback, or start the current (or first) track."""
        with self._lock:
            if self._state == PlaybackState.PAUSED:
                self._state = PlaybackState.PLAYING
                return
            if self._state == PlaybackState.PLAYING:
                return
            track = self._current_track or self.track_at(self._current_playlist, 0)
        if track is not None:
            self._play(track)

    def play_index(self, index: int) -> None:
        """Play a track of the current playlist."""
        track = self.track_at(self.current_playlist(), index)
        if track is None:
            self.logger.debug("No track at index %s", index)
            return
        self._play(track)

    def play_random(self) -> None:
        """Play a random track of the current playlist."""
        with self._lock:
            playlist = self._current_playlist
            tracks = self.playlists[playlist].tracks if playlist >= 0 else []
            track = random.choice(tracks) if tracks else None  # noqa: S311
        if track is not None:
            self._play(track)

    def pause(self) -> None:
        """Pause playback."""
        with self._lock:
            if self._state == PlaybackState.PLAYING:
                self._state = PlaybackState.PAUSED

    def stop(self) -> None:
        """Stop playback."""
        with self._lock:
            if self._state == PlaybackState.STOPPED:
                return
            previous = self._current_track
            self._state = PlaybackState.STOPPED
            self._current_track = None
            self._position = 0.0
        self._signal_track_changed(previous, None)

    def previous(self) -> None:
        """Play the previous track of the current playlist."""
        self._step(-1)

    def next(self) -> None:
        """Play the next queued track, or the next track of the current playlist."""
        with self._lock:
            queued = self.get_track(self.queue.pop(0)) if self.queue else None
        if queued is not None:
            self._play(queued)
            return
        self._step(1)

    def get_volume_db(self) -> float:
        """Return the volume in dB."""
        with self._lock:
            return self._volume_db

    def set_volume_db(self, value: float) -> None:
        """Set the volume in dB, clamped to the supported range."""
        with self._lock:
            self._volume_db = min(VOLUME_MAX_DB, max(VOLUME_MIN_DB, value))

    def get_position(self) -> float:
        """Return the playback position in seconds."""
        with self._lock:
            return self._position

    def set_position(self, value: float) -> None:
        """Seek within the current track."""
        with self._lock:
            if self._current_track is None:
                return
            self._position = min(self._current_track.duration, max(0.0, value))

    # configuration and process

    def conf_get_str(self, key: str, default: str = "") -> str:
        """Return a configuration value."""
        return self.config.get(key, default)

    def get_option(self, key: str, default: bool = False) -> bool:  # noqa: FBT001,FBT002
        """Return a persisted option."""
        with self._lock:
            return self.options.get(key, default)

    def set_option(self, key: str, value: bool) -> None:  # noqa: FBT001
        """Persist an option."""
        with self._lock:
            self.options[key] = value
        self.signal_event(PlayerEvent(EventType.CONFIG_CHANGED, {"key": key}))

    def terminate(self) -> None:
        """Shut the player down."""
        self.logger.info("Termination requested")
        self.terminated.set()
        if self.on_terminate is not None:
            self.on_terminate()

    # events

    def signal_event(self, event: PlayerEvent) -> None:
        """Signal event to all subscribers."""
        with self._lock:
            subscribers = list(self._subscribers)
        for cb_func, event_filter in subscribers:
            if event_filter and event.type not in event_filter:
                continue
            cb_func(event)

    def subscribe(
        self,
        cb_func: EventCallBackType,
        event_filter: EventType | tuple[EventType, ...] | None = None,
    ) -> Callable[[], None]:
        """
        Subscribe to player events.

        Returns function to remove the listener.
            :param cb_func: callback function
            :param event_filter: Optionally only listen for this event(s).
        """
        if isinstance(event_filter, EventType):
            event_filter = (event_filter,)
        elif event_filter is None:
            event_filter = ()

        listener = (cb_func, event_filter)
        with self._lock:
            self._subscribers.append(listener)

        def remove_listener() -> None:
            with self._lock:
                self._subscribers.remove(listener)

        return remove_listener

    def _play(self, track: Track) -> None:
        with self._lock:
            previous = self._current_track
            self._current_track = track
            self._state = PlaybackState.PLAYING
            self._position = 0.0
        self._signal_track_changed(previous, track)

    def _step(self, offset: int) -> None:
        with self._lock:
            current = self._current_track
            index = self.index_of(current.handle) if current else -1
        if index < 0:
            self.play_current()
            return
        track = self.track_at(self.current_playlist(), index + offset)
        if track is None:
            self.stop()
            return
        self._play(track)

    def _signal_track_changed(self, previous: Track | None, track: Track | None) -> None:
        self.signal_event(
            PlayerEvent(
                EventType.TRACK_CHANGED,
                {
                    "from": previous.handle if previous else None,
                    "to": track.handle if track else None,
                },
            ),
        )

    def _signal_playlist_changed(self, change: PlaylistChange) -> None:
        self.signal_event(PlayerEvent(EventType.PLAYLIST_CHANGED, {"change": change}))
