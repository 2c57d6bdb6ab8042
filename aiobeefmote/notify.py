"""Bridge from host player events to unsolicited client messages."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import TYPE_CHECKING

from .const import MSG_PLAYLIST_CHANGED
from .models import EventType, PlayerEvent, PlaylistChange
from .util import format_track

if TYPE_CHECKING:
    from .models import ServerState
    from .player import PlayerControl

DeliverType = Callable[[str], bool]

BRIDGE_EVENTS = (EventType.TRACK_CHANGED, EventType.PLAYLIST_CHANGED)


class NotificationBridge:
    """
    React to player events and notify the connected client (if it asked for it).

    Called on host threads. It never blocks: messages are handed to `deliver`,
    which queues them on the worker and returns whether a client was there.
    """

    def __init__(
        self,
        player: PlayerControl,
        state: ServerState,
        deliver: DeliverType,
        logger: logging.Logger,
    ) -> None:
        """Initialize the bridge."""
        self.player = player
        self.state = state
        self.deliver = deliver
        self.logger = logger

    def on_player_event(self, event: PlayerEvent) -> None:
        """Handle an event emitted by the player host."""
        if event.type == EventType.TRACK_CHANGED:
            self._on_track_changed(event)
        elif event.type == EventType.PLAYLIST_CHANGED:
            self._on_playlist_changed(event)

    def _on_track_changed(self, event: PlayerEvent) -> None:
        handle = event.data.get("to")
        with self.state.lock:
            self.state.current_track = handle
            notify = self.state.notify_now_playing
        if handle is None or not notify:
            return
        track = self.player.get_track(handle)
        if track is None:
            # already gone again
            return
        self.deliver(f"Now playing {format_track(self.player, track)}\n")

    def _on_playlist_changed(self, event: PlayerEvent) -> None:
        # the host can't tell which tracks changed, only that the content did
        if event.data.get("change") != PlaylistChange.CONTENT:
            return
        with self.state.lock:
            notify = self.state.notify_playlist_changed
        if notify and not self.deliver(f"{MSG_PLAYLIST_CHANGED}\n"):
            self.logger.debug("Playlist changed, but no client to notify")
