"""Tests for the command registry, dispatcher and handlers."""

import pytest

from aiobeefmote import commands
from aiobeefmote.commands import (
    COMMAND_TABLE,
    Command,
    CommandId,
    CommandRegistry,
    RemoteCommands,
)
from aiobeefmote.const import OPTION_STOP_AFTER_CURRENT
from aiobeefmote.errors import BeefmoteException, DuplicateCommandError
from aiobeefmote.memory import MemoryPlayer
from aiobeefmote.models import PlaybackState, ServerState

from .conftest import CommandHarness

SCHISM = "[Tool - Lateralus] 05 - Schism (6:48)"


def test_command_names_unique(harness):
    """Test every command is registered once, in CommandId order."""
    names = [command.name for command in harness.commands.registry]
    assert len(names) == len(set(names))
    assert len(harness.commands.registry) == len(CommandId) == len(COMMAND_TABLE)
    assert harness.commands.registry[CommandId.HELP].name == "h"
    assert harness.commands.registry[CommandId.EXIT].name == "exit"


def test_duplicate_command_rejected():
    """Test the registry refuses two commands with the same name."""
    entries = [
        Command("pp", "plays.", lambda arg: None),
        Command("pp", "plays again.", lambda arg: None),
    ]
    with pytest.raises(DuplicateCommandError):
        CommandRegistry(entries)


def test_command_table_order_checked(monkeypatch, player):
    """Test handlers refuse to start when the table is out of CommandId order."""
    monkeypatch.setattr(commands, "COMMAND_TABLE", COMMAND_TABLE[::-1])
    with pytest.raises(BeefmoteException):
        RemoteCommands(player, ServerState())


def test_invalid_command(harness, player):
    """Test unknown commands get the fixed invalid command message only."""
    assert harness.run("nope\r\n") == "Please type a valid command\n"
    # no prefix matching in either direction
    assert harness.run("ppp\r\n") == "Please type a valid command\n"
    assert harness.run("t\r\n") == "Please type a valid command\n"
    assert player.playback_state() == PlaybackState.STOPPED
    assert player.current_playlist() == 0


def test_help(harness):
    """Test help lists every command with its help text."""
    output = harness.run("h\r\n")
    assert output.startswith("HELP_BEGIN\n")
    assert output.endswith("HELP_END\n")
    assert "pp\n\tplays current track.\n" in output
    for command in harness.commands.registry:
        assert f"{command.name}\n\t{command.help}\n" in output


def test_list_playlists(harness):
    """Test listing playlists marks the current one."""
    assert harness.run("pl\r\n") == (
        "PLAYLISTS_BEGIN\nPlaylist 1: Tool (*)\nPlaylist 2: Jazz\nPLAYLISTS_END\n"
    )


def test_select_playlist(harness, player):
    """Test selecting a playlist by 1-based index."""
    assert harness.run("pl 2\r\n") == ""
    assert player.current_playlist() == 1
    assert "Playlist 2: Jazz (*)" in harness.run("pl\r\n")


@pytest.mark.parametrize("argument", ["0", "3", "-1", "abc"])
def test_select_playlist_out_of_bounds(harness, player, argument):
    """Test an out of range playlist index is rejected without state change."""
    assert harness.run(f"pl {argument}\r\n") == "Playlist index out of bounds\n"
    assert player.current_playlist() == 0


def test_no_playlists():
    """Test commands on a player without playlists."""
    harness = CommandHarness(MemoryPlayer())
    assert harness.run("pl\r\n") == "No playlists\n"
    assert harness.run("tl\r\n") == "No current playlist\n"
    assert harness.run("/ foo\r\n") == "No current playlist\n"


def test_tracklist(harness):
    """Test listing the tracks of the current playlist."""
    assert harness.run("tl\r\n") == (
        "TRACKLIST_BEGIN\n"
        "(1) [Tool - Lateralus] 01 - The Grudge (8:35)\n"
        f"(2) {SCHISM}\n"
        "(3) [Tool - Lateralus] 07 - Parabola (6:03)\n"
        "TRACKLIST_END\n"
    )


def test_tracklist_address(harness, player):
    """Test listing the tracks prefixed by their handle."""
    track = player.track_at(0, 1)
    output = harness.run("tla\r\n")
    assert f"(2) {track.handle:#x} {SCHISM}\n" in output
    assert output.startswith("TRACKLIST_BEGIN\n")
    assert output.endswith("TRACKLIST_END\n")


def test_track_current(harness, player):
    """Test printing the current track, revalidating its handle."""
    assert harness.run("tc\r\n") == "No current track\n"
    track = player.track_at(0, 1)
    harness.state.current_track = track.handle
    assert harness.run("tc\r\n") == f"{SCHISM}\n"
    player.remove_track(track.handle)
    assert harness.run("tc\r\n") == "No current track\n"


def test_play_resume(harness, player):
    """Test pause/resume toggling and playing by index."""
    assert harness.run("p\r\n") == ""
    assert player.playback_state() == PlaybackState.PLAYING
    assert player.current_track.title == "The Grudge"
    harness.run("p\r\n")
    assert player.playback_state() == PlaybackState.PAUSED
    harness.run("p\r\n")
    assert player.playback_state() == PlaybackState.PLAYING
    assert player.current_track.title == "The Grudge"

    assert harness.run("p 2\r\n") == ""
    assert player.current_track.title == "Schism"
    assert harness.run("p 9\r\n") == "Track index out of bounds\n"
    assert player.current_track.title == "Schism"


def test_transport_controls(harness, player):
    """Test the zero argument transport commands."""
    harness.run("pp\r\n")
    assert player.current_track.title == "The Grudge"
    harness.run("nt\r\n")
    assert player.current_track.title == "Schism"
    harness.run("pv\r\n")
    assert player.current_track.title == "The Grudge"
    harness.run("s\r\n")
    assert player.playback_state() == PlaybackState.STOPPED
    harness.run("r\r\n")
    assert player.playback_state() == PlaybackState.PLAYING
    assert player.current_track.album == "Lateralus"


def test_search(harness):
    """Test searching the current playlist."""
    harness.run("pl 2\r\n")
    assert harness.run("/ green\r\n") == (
        "SEARCH_BEGIN\n"
        "(1) [Miles Davis - Kind of Blue] 03 - Blue in Green (5:37)\n"
        "SEARCH_END\n"
    )
    assert harness.run("/ kind of blue\r\n").count("\n") == 4
    assert harness.run("/ xyz\r\n") == "(nothing was found)\n"


def test_search_without_argument(harness):
    """Test search answers with its help text when the query is missing."""
    help_text = harness.commands.registry[CommandId.SEARCH].help
    assert harness.run("/\r\n") == f"{help_text}\n"


def test_play_search(harness, player):
    """Test playing a track of the search result."""
    harness.run("/ schism\r\n")
    assert harness.run("ps 1\r\n") == f"Playing {SCHISM}\n"
    assert player.current_track.title == "Schism"


@pytest.mark.parametrize("argument", ["0", "2", "abc", "-1"])
def test_play_search_invalid_index(harness, player, argument):
    """Test invalid search indexes are rejected."""
    harness.run("/ schism\r\n")
    assert harness.run(f"ps {argument}\r\n") == "Invalid search index\n"
    assert player.current_track is None


def test_play_search_without_argument(harness):
    """Test ps answers with its help text when the index is missing."""
    help_text = harness.commands.registry[CommandId.PLAY_SEARCH].help
    assert harness.run("ps\r\n") == f"{help_text}\n"


def test_add_search_result_to_queue(harness, player):
    """Test queueing a search result, which then plays next."""
    track = player.track_at(0, 2)
    harness.run("/ parabola\r\n")
    assert harness.run("aps 1\r\n") == ""
    assert player.queue == [track.handle]
    assert harness.run("aps 0\r\n") == "Invalid search index\n"
    harness.run("nt\r\n")
    assert player.current_track == track
    assert player.queue == []


def test_play_address(harness, player):
    """Test playing a track by its hex handle."""
    track = player.track_at(0, 2)
    assert harness.run(f"pa {track.handle:#x}\r\n") == ""
    assert player.current_track == track
    other = player.track_at(0, 1)
    assert harness.run(f"pa {other.handle:x}\r\n") == ""
    assert player.current_track == other


def test_play_address_invalid(harness, player):
    """Test stale or malformed handles are never played."""
    track = player.track_at(0, 2)
    player.remove_track(track.handle)
    assert harness.run(f"pa {track.handle:#x}\r\n") == "Invalid track address\n"
    assert harness.run("pa zz\r\n") == "Invalid track address\n"
    assert harness.run("pa 0x1\r\n") == "Invalid track address\n"
    assert player.current_track is None
    help_text = harness.commands.registry[CommandId.PLAY_ADDRESS].help
    assert harness.run("pa\r\n") == f"{help_text}\n"


def test_volume(harness, player):
    """Test volume steps, default and explicit."""
    harness.run("vd\r\n")
    assert player.get_volume_db() == -5
    harness.run("vd 10\r\n")
    assert player.get_volume_db() == -15
    harness.run("vu 3\r\n")
    assert player.get_volume_db() == -12
    help_text = harness.commands.registry[CommandId.VOLUME_UP].help
    assert harness.run("vu loud\r\n") == f"{help_text}\n"
    assert harness.run("vu nan\r\n") == f"{help_text}\n"
    assert harness.run("vu inf\r\n") == f"{help_text}\n"
    assert player.get_volume_db() == -12


def test_seek(harness, player):
    """Test seeking steps, default and explicit."""
    harness.run("pp\r\n")
    harness.run("sf\r\n")
    assert player.get_position() == 5
    harness.run("sf 20\r\n")
    assert player.get_position() == 25
    harness.run("sb\r\n")
    assert player.get_position() == 20
    help_text = harness.commands.registry[CommandId.SEEK_FORWARD].help
    assert harness.run("sf inf\r\n") == f"{help_text}\n"
    assert harness.run("sf NaN\r\n") == f"{help_text}\n"
    assert player.get_position() == 20


def test_stop_after_current(harness, player):
    """Test toggling the persisted stop after current option."""
    assert harness.run("sac\r\n") == "Stop after current set to true.\n"
    assert player.get_option(OPTION_STOP_AFTER_CURRENT) is True
    assert harness.run("sac\r\n") == "Stop after current set to false.\n"
    assert player.get_option(OPTION_STOP_AFTER_CURRENT) is False


def test_notify_playlist_changed(harness):
    """Test toggling playlist changed notifications."""
    assert harness.run("ntfy-plchanged\r\n") == "Notification set to true.\n"
    assert harness.state.notify_playlist_changed is True
    assert harness.run("ntfy-plchanged\r\n") == "Notification set to false.\n"
    assert harness.state.notify_playlist_changed is False


def test_notify_now_playing(harness):
    """Test setting now playing notifications."""
    assert harness.run("ntfy-nowplaying true\r\n") == "Notification set to true.\n"
    assert harness.state.notify_now_playing is True
    assert harness.run("ntfy-nowplaying false\r\n") == "Notification set to false.\n"
    assert harness.state.notify_now_playing is False


@pytest.mark.parametrize("raw_line", ["ntfy-nowplaying\r\n", "ntfy-nowplaying yes\r\n"])
def test_notify_now_playing_invalid(harness, raw_line):
    """Test anything but true/false answers with the command's help text."""
    help_text = harness.commands.registry[CommandId.NOTIFY_NOW_PLAYING].help
    assert harness.run(raw_line) == f"{help_text}\n"
    assert harness.state.notify_now_playing is False


def test_exit(harness, player):
    """Test exit asks the host to terminate."""
    assert harness.run("exit\r\n") == ""
    assert player.terminated.is_set()


def test_handler_error_reported(harness, player, monkeypatch):
    """Test unexpected handler errors are reported instead of propagated."""

    def broken() -> int:
        raise RuntimeError("boom")

    monkeypatch.setattr(player, "playlist_count", broken)
    assert harness.run("pl\r\n") == "Error while processing command\n"
    assert harness.run("tl\r\n").startswith("TRACKLIST_BEGIN\n")
