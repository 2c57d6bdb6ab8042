"""
Command registry, handlers and dispatcher of the remote control protocol.

Every command has a short fixed name and a one-line help text. Handlers take
the (optional) raw argument of a line and return the text to send back, or
None when the command has nothing to report. List output is wrapped in
explicit <NAME>_BEGIN / <NAME>_END marker lines.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import IntEnum
import logging
from typing import TYPE_CHECKING, Protocol

from .const import (
    MSG_COMMAND_FAILED,
    MSG_INVALID_ADDRESS,
    MSG_INVALID_COMMAND,
    MSG_INVALID_SEARCH_INDEX,
    MSG_NO_CURRENT_TRACK,
    MSG_NO_PLAYLIST,
    MSG_NO_PLAYLISTS,
    MSG_NOTHING_FOUND,
    MSG_PLAYLIST_OUT_OF_BOUNDS,
    MSG_TRACK_OUT_OF_BOUNDS,
    OPTION_STOP_AFTER_CURRENT,
    SEEK_STEP,
    VOLUME_STEP,
)
from .errors import BeefmoteException, DuplicateCommandError, InvalidArgumentError
from .models import PlaybackState, PlaylistView
from .util import format_track, parse_handle, parse_index, parse_number

if TYPE_CHECKING:
    from .models import ParsedCommand, ServerState, Track
    from .player import PlayerControl

# ruff: noqa: ARG002

HandlerType = Callable[[str | None], str | None]


class CommandId(IntEnum):
    """Dense enumeration of the commands, in registry order."""

    HELP = 0
    PLAYLISTS = 1
    TRACKLIST = 2
    TRACKLIST_ADDRESS = 3
    TRACK_CURRENT = 4
    PLAY = 5
    PLAY_SEARCH = 6
    PLAY_ADDRESS = 7
    PLAY_RESUME = 8
    RANDOM = 9
    STOP_AFTER_CURRENT = 10
    STOP = 11
    PREVIOUS = 12
    NEXT = 13
    VOLUME_UP = 14
    VOLUME_DOWN = 15
    SEEK_FORWARD = 16
    SEEK_BACKWARD = 17
    SEARCH = 18
    NOTIFY_PLAYLIST_CHANGED = 19
    NOTIFY_NOW_PLAYING = 20
    ADD_SEARCH_PLAYBACK_QUEUE = 21
    EXIT = 22


# (id, name, handler suffix, help)
COMMAND_TABLE: tuple[tuple[CommandId, str, str, str], ...] = (
    (CommandId.HELP, "h", "help", "prints this message."),
    (
        CommandId.PLAYLISTS,
        "pl",
        "playlists",
        "usage: pl [idx]. If passed with no arguments, prints all playlists (the "
        "current playlist is marked with (*)). If passed with an index number, sets "
        "the current playlist to the playlist with index idx.",
    ),
    (
        CommandId.TRACKLIST,
        "tl",
        "tracklist",
        "prints all the tracks in the current playlist.",
    ),
    (
        CommandId.TRACKLIST_ADDRESS,
        "tla",
        "tracklist_address",
        "like tl, but prepends each track by its address.",
    ),
    (CommandId.TRACK_CURRENT, "tc", "track_current", "prints the current track."),
    (CommandId.PLAY, "pp", "play", "plays current track."),
    (
        CommandId.PLAY_SEARCH,
        "ps",
        "play_search",
        "usage: ps idx. Plays a track by its index in the search list.",
    ),
    (
        CommandId.PLAY_ADDRESS,
        "pa",
        "play_address",
        "usage: pa addr. Plays a track by address; addr must be written in hex "
        "notation.",
    ),
    (
        CommandId.PLAY_RESUME,
        "p",
        "play_resume",
        "usage: p [idx]. If passed with no arguments, pauses/resumes playback. If "
        "passed with an index, plays the track at index idx in the current playlist.",
    ),
    (CommandId.RANDOM, "r", "random", "plays random track."),
    (
        CommandId.STOP_AFTER_CURRENT,
        "sac",
        "stop_after_current",
        "stops playback after current track.",
    ),
    (CommandId.STOP, "s", "stop", "stops playback."),
    (CommandId.PREVIOUS, "pv", "previous", "plays previous track."),
    (CommandId.NEXT, "nt", "next", "plays next track."),
    (
        CommandId.VOLUME_UP,
        "vu",
        "volume_up",
        f"usage: vu [step]. If no argument is passed, increases volume by a default "
        f"step of {VOLUME_STEP} dB. If a number is passed, increases volume by that "
        "amount.",
    ),
    (
        CommandId.VOLUME_DOWN,
        "vd",
        "volume_down",
        f"usage: vd [step]. If no argument is passed, decreases volume by a default "
        f"step of {VOLUME_STEP} dB. If a number is passed, decreases volume by that "
        "amount.",
    ),
    (
        CommandId.SEEK_FORWARD,
        "sf",
        "seek_forward",
        f"usage: sf [step]. Seeks forward {SEEK_STEP} seconds, or step seconds if "
        "a number is passed.",
    ),
    (
        CommandId.SEEK_BACKWARD,
        "sb",
        "seek_backward",
        f"usage: sb [step]. Seeks backward {SEEK_STEP} seconds, or step seconds if "
        "a number is passed.",
    ),
    (
        CommandId.SEARCH,
        "/",
        "search",
        "usage: / str. Searches a string in the current playlist and returns a list "
        "of matching tracks. The matched tracks can be played by using their index "
        "number with the ps command.",
    ),
    (
        CommandId.NOTIFY_PLAYLIST_CHANGED,
        "ntfy-plchanged",
        "notify_playlist_changed",
        "Toggles notifying when the current playlist has changed (meaning you'll "
        "probably want to get the tracklist again). Default: false.",
    ),
    (
        CommandId.NOTIFY_NOW_PLAYING,
        "ntfy-nowplaying",
        "notify_now_playing",
        "usage: ntfy-nowplaying true/false. Sets whether to notify when a new track "
        "starts to play. Default: false.",
    ),
    (
        CommandId.ADD_SEARCH_PLAYBACK_QUEUE,
        "aps",
        "add_search_playback_queue",
        "usage: aps idx. Adds a searched track to the playback queue.",
    ),
    (CommandId.EXIT, "exit", "exit", "terminates the player."),
)


@dataclass(frozen=True)
class Command:
    """A named command of the remote control protocol."""

    name: str
    help: str
    handler: HandlerType


class CommandRegistry:
    """Ordered, fixed table of commands, indexed by CommandId and by name."""

    def __init__(self, commands: Iterable[Command]) -> None:
        """Build the registry, refusing duplicate names."""
        self._commands: list[Command] = []
        self._by_name: dict[str, Command] = {}
        for command in commands:
            if command.name in self._by_name:
                msg = f"Command name registered twice: {command.name}"
                raise DuplicateCommandError(msg)
            self._commands.append(command)
            self._by_name[command.name] = command

    def __iter__(self) -> Iterator[Command]:
        """Iterate the commands in registry order."""
        return iter(self._commands)

    def __len__(self) -> int:
        """Return the number of registered commands."""
        return len(self._commands)

    def __getitem__(self, command_id: CommandId) -> Command:
        """Return command by id."""
        return self._commands[command_id]

    def get(self, name: str) -> Command | None:
        """Return command by (exact) name."""
        return self._by_name.get(name)


class ResponseWriter(Protocol):
    """Anything the dispatcher can write a response to."""

    async def send(self, text: str) -> None:
        """Write text to the client."""


class CommandDispatcher:
    """Look up parsed commands in the registry and run their handlers."""

    def __init__(self, registry: CommandRegistry, logger: logging.Logger) -> None:
        """Initialize the dispatcher."""
        self.registry = registry
        self.logger = logger

    async def dispatch(self, session: ResponseWriter, parsed: ParsedCommand) -> None:
        """Run the handler for a parsed command and send its response."""
        command = self.registry.get(parsed.command)
        if command is None:
            self.logger.debug("Invalid command received: %r", parsed.command)
            await session.send(line(MSG_INVALID_COMMAND))
            return
        self.logger.debug(
            "Handling command %s (argument: %r)",
            command.name,
            parsed.argument,
        )
        try:
            response = command.handler(parsed.argument)
        except InvalidArgumentError as err:
            response = line(str(err))
        except Exception:  # noqa: BLE001
            self.logger.exception("Error handling command %s", command.name)
            response = line(MSG_COMMAND_FAILED)
        if response:
            await session.send(response)


def line(text: str) -> str:
    """Terminate a single response line."""
    return f"{text}\n"


def block(name: str, lines: Iterable[str]) -> str:
    """Wrap multi-record output in begin/end marker lines."""
    body = "".join(line(x) for x in lines)
    return f"{name}_BEGIN\n{body}{name}_END\n"


class RemoteCommands:
    """Handlers of all remote control commands."""

    def __init__(self, player: PlayerControl, state: ServerState) -> None:
        """Initialize the handlers and build the command registry."""
        self.player = player
        self.state = state
        commands: list[Command] = []
        for command_id, name, suffix, help_text in COMMAND_TABLE:
            # registry lookups by CommandId rely on table order
            if command_id != len(commands):
                raise BeefmoteException(f"Command {command_id!r} out of order")
            commands.append(Command(name, help_text, getattr(self, f"_handle_{suffix}")))
        self.registry = CommandRegistry(commands)

    def usage(self, command_id: CommandId) -> str:
        """Return the help text of a command as response."""
        return line(self.registry[command_id].help)

    def _current_playlist(self) -> int:
        playlist = self.player.current_playlist()
        if playlist < 0:
            raise InvalidArgumentError(MSG_NO_PLAYLIST)
        return playlist

    def _iter_tracks(self, playlist: int, view: PlaylistView) -> Iterator[Track]:
        index = 0
        while (track := self.player.track_at(playlist, index, view)) is not None:
            yield track
            index += 1

    def _tracklist(self, with_handle: bool) -> str:  # noqa: FBT001
        playlist = self._current_playlist()
        return block(
            "TRACKLIST",
            (
                f"({index}) {format_track(self.player, track, with_handle)}"
                for index, track in enumerate(
                    self._iter_tracks(playlist, PlaylistView.MAIN),
                    start=1,
                )
            ),
        )

    def _search_result(self, command_id: CommandId, argument: str | None) -> Track:
        """Resolve a 1-based index into the most recent search result."""
        if argument is None:
            raise InvalidArgumentError(self.registry[command_id].help)
        index = parse_index(argument)
        if index is None:
            raise InvalidArgumentError(MSG_INVALID_SEARCH_INDEX)
        playlist = self._current_playlist()
        track = self.player.track_at(playlist, index - 1, PlaylistView.SEARCH)
        if track is None:
            raise InvalidArgumentError(MSG_INVALID_SEARCH_INDEX)
        return track

    def _step(self, command_id: CommandId, argument: str | None, default: int) -> float:
        if argument is None:
            return default
        step = parse_number(argument)
        if step is None:
            raise InvalidArgumentError(self.registry[command_id].help)
        return step

    def _handle_help(self, argument: str | None) -> str:
        """Handle `h` command."""
        return block(
            "HELP",
            (f"{command.name}\n\t{command.help}" for command in self.registry),
        )

    def _handle_playlists(self, argument: str | None) -> str | None:
        """Handle `pl [idx]` command."""
        count = self.player.playlist_count()
        if count <= 0:
            return line(MSG_NO_PLAYLISTS)
        if argument is not None:
            index = parse_index(argument)
            if index is None or index > count:
                return line(MSG_PLAYLIST_OUT_OF_BOUNDS)
            self.player.set_current_playlist(index - 1)
            return None
        current = self.player.current_playlist()
        return block(
            "PLAYLISTS",
            (
                "Playlist {}: {}{}".format(
                    index + 1,
                    self.player.playlist_title(index),
                    " (*)" if index == current else "",
                )
                for index in range(count)
            ),
        )

    def _handle_tracklist(self, argument: str | None) -> str:
        """Handle `tl` command."""
        return self._tracklist(False)

    def _handle_tracklist_address(self, argument: str | None) -> str:
        """Handle `tla` command."""
        return self._tracklist(True)

    def _handle_track_current(self, argument: str | None) -> str:
        """Handle `tc` command."""
        with self.state.lock:
            handle = self.state.current_track
        # the host may have dropped the track since it was reported
        track = self.player.get_track(handle) if handle is not None else None
        if track is None:
            return line(MSG_NO_CURRENT_TRACK)
        return line(format_track(self.player, track))

    def _handle_play(self, argument: str | None) -> None:
        """Handle `pp` command."""
        self.player.play_current()

    def _handle_play_search(self, argument: str | None) -> str:
        """Handle `ps idx` command."""
        track = self._search_result(CommandId.PLAY_SEARCH, argument)
        # play by index in the main view of the playlist
        index = self.player.index_of(track.handle)
        if index < 0:
            raise InvalidArgumentError(MSG_INVALID_SEARCH_INDEX)
        self.player.play_index(index)
        return line(f"Playing {format_track(self.player, track)}")

    def _handle_play_address(self, argument: str | None) -> str | None:
        """Handle `pa addr` command."""
        if argument is None:
            return self.usage(CommandId.PLAY_ADDRESS)
        handle = parse_handle(argument)
        if handle is None or self.player.get_track(handle) is None:
            raise InvalidArgumentError(MSG_INVALID_ADDRESS)
        index = self.player.index_of(handle)
        if index < 0:
            raise InvalidArgumentError(MSG_INVALID_ADDRESS)
        self.player.play_index(index)
        return None

    def _handle_play_resume(self, argument: str | None) -> str | None:
        """Handle `p [idx]` command."""
        if argument is not None:
            index = parse_index(argument)
            playlist = self._current_playlist()
            if index is None or self.player.track_at(playlist, index - 1) is None:
                return line(MSG_TRACK_OUT_OF_BOUNDS)
            self.player.play_index(index - 1)
            return None
        if self.player.playback_state() == PlaybackState.PLAYING:
            self.player.pause()
        else:
            self.player.play_current()
        return None

    def _handle_random(self, argument: str | None) -> None:
        """Handle `r` command."""
        self.player.play_random()

    def _handle_stop_after_current(self, argument: str | None) -> str:
        """Handle `sac` command."""
        value = not self.player.get_option(OPTION_STOP_AFTER_CURRENT)
        self.player.set_option(OPTION_STOP_AFTER_CURRENT, value)
        return line(f"Stop after current set to {str(value).lower()}.")

    def _handle_stop(self, argument: str | None) -> None:
        """Handle `s` command."""
        self.player.stop()

    def _handle_previous(self, argument: str | None) -> None:
        """Handle `pv` command."""
        self.player.previous()

    def _handle_next(self, argument: str | None) -> None:
        """Handle `nt` command."""
        self.player.next()

    def _handle_volume_up(self, argument: str | None) -> None:
        """Handle `vu [step]` command."""
        step = self._step(CommandId.VOLUME_UP, argument, VOLUME_STEP)
        self.player.set_volume_db(self.player.get_volume_db() + step)

    def _handle_volume_down(self, argument: str | None) -> None:
        """Handle `vd [step]` command."""
        step = self._step(CommandId.VOLUME_DOWN, argument, VOLUME_STEP)
        self.player.set_volume_db(self.player.get_volume_db() - step)

    def _handle_seek_forward(self, argument: str | None) -> None:
        """Handle `sf [step]` command."""
        step = self._step(CommandId.SEEK_FORWARD, argument, SEEK_STEP)
        self.player.set_position(self.player.get_position() + step)

    def _handle_seek_backward(self, argument: str | None) -> None:
        """Handle `sb [step]` command."""
        step = self._step(CommandId.SEEK_BACKWARD, argument, SEEK_STEP)
        self.player.set_position(self.player.get_position() - step)

    def _handle_search(self, argument: str | None) -> str:
        """Handle `/ str` command."""
        if argument is None:
            return self.usage(CommandId.SEARCH)
        playlist = self._current_playlist()
        self.player.search(playlist, argument.strip())
        results = [
            f"({index}) {format_track(self.player, track)}"
            for index, track in enumerate(
                self._iter_tracks(playlist, PlaylistView.SEARCH),
                start=1,
            )
        ]
        if not results:
            return line(MSG_NOTHING_FOUND)
        return block("SEARCH", results)

    def _handle_notify_playlist_changed(self, argument: str | None) -> str:
        """Handle `ntfy-plchanged` command."""
        with self.state.lock:
            self.state.notify_playlist_changed = not self.state.notify_playlist_changed
            value = self.state.notify_playlist_changed
        return line(f"Notification set to {str(value).lower()}.")

    def _handle_notify_now_playing(self, argument: str | None) -> str:
        """Handle `ntfy-nowplaying true/false` command."""
        value = argument.strip() if argument is not None else None
        if value not in ("true", "false"):
            return self.usage(CommandId.NOTIFY_NOW_PLAYING)
        with self.state.lock:
            self.state.notify_now_playing = value == "true"
        return line(f"Notification set to {value}.")

    def _handle_add_search_playback_queue(self, argument: str | None) -> None:
        """Handle `aps idx` command."""
        track = self._search_result(CommandId.ADD_SEARCH_PLAYBACK_QUEUE, argument)
        self.player.queue_push(track.handle)

    def _handle_exit(self, argument: str | None) -> None:
        """Handle `exit` command."""
        self.player.terminate()
