"""Fixtures for the remote control tests."""

from __future__ import annotations

import asyncio
import logging

import pytest

from aiobeefmote.commands import CommandDispatcher, RemoteCommands
from aiobeefmote.memory import MemoryPlayer
from aiobeefmote.models import ServerState
from aiobeefmote.parser import parse_line

LIBRARY = {
    "Tool": [
        {
            "artist": "Tool",
            "album": "Lateralus",
            "title": "The Grudge",
            "track_number": "01",
            "duration": 515,
        },
        {
            "artist": "Tool",
            "album": "Lateralus",
            "title": "Schism",
            "track_number": "05",
            "duration": 408,
        },
        {
            "artist": "Tool",
            "album": "Lateralus",
            "title": "Parabola",
            "track_number": "07",
            "duration": 363,
        },
    ],
    "Jazz": [
        {
            "artist": "Miles Davis",
            "album": "Kind of Blue",
            "title": "So What",
            "track_number": "01",
            "duration": 562,
        },
        {
            "artist": "Miles Davis",
            "album": "Kind of Blue",
            "title": "Blue in Green",
            "track_number": "03",
            "duration": 337,
        },
    ],
}


class RecordingSession:
    """Stand-in for a client session collecting everything sent to it."""

    def __init__(self) -> None:
        self.output: list[str] = []
        self.closed = False

    async def send(self, text: str) -> None:
        self.output.append(text)

    @property
    def text(self) -> str:
        return "".join(self.output)


class CommandHarness:
    """Run raw client lines through the parser, dispatcher and handlers."""

    def __init__(self, player: MemoryPlayer) -> None:
        self.player = player
        self.state = ServerState()
        self.commands = RemoteCommands(player, self.state)
        self.dispatcher = CommandDispatcher(
            self.commands.registry,
            logging.getLogger("tests"),
        )

    def run(self, raw_line: str) -> str:
        session = RecordingSession()
        asyncio.run(self.dispatcher.dispatch(session, parse_line(raw_line)))
        return session.text


@pytest.fixture
def player() -> MemoryPlayer:
    """Return a player holding a small library."""
    player = MemoryPlayer()
    for title, tracks in LIBRARY.items():
        player.add_playlist(title, tracks)
    return player


@pytest.fixture
def harness(player: MemoryPlayer) -> CommandHarness:
    """Return a command harness on top of the player."""
    return CommandHarness(player)
