"""A connected remote control client and the loop serving it."""

from __future__ import annotations

import asyncio
from contextlib import suppress
import logging
from typing import TYPE_CHECKING, Any

from async_timeout import timeout

from .const import ENCODING, READ_BUFSIZE, WAIT_CLIENT
from .parser import parse_line

if TYPE_CHECKING:
    from .cancellation import CancellationToken
    from .commands import CommandDispatcher


class Session:
    """The (single) active client connection."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        logger: logging.Logger,
    ) -> None:
        """Initialize the session. Must be called from within the worker loop."""
        self._reader = reader
        self._writer = writer
        self.address: Any = writer.get_extra_info("peername")
        self.logger = logger
        self.lines_received = 0
        self._closed = False
        # notifications and command responses are written as whole units
        self._write_lock = asyncio.Lock()

    @property
    def closed(self) -> bool:
        """Return True once the connection is gone."""
        return self._closed or self._writer.is_closing()

    async def send(self, text: str) -> None:
        """Write text to the client, closing the session on transport errors."""
        if self.closed:
            return
        data = text.encode(ENCODING)
        async with self._write_lock:
            if self.closed:
                return
            try:
                self._writer.write(data)
                await self._writer.drain()
            except ConnectionError as err:
                self.logger.debug("Error while sending to %s: %s", self.address, err)
                self.close()

    async def receive(self) -> bytes | None:
        """
        Wait for data from the client.

        Returns None when nothing arrived within the wait period and an empty
        bytes object when the peer closed the connection.
        """
        try:
            async with timeout(WAIT_CLIENT):
                return await self._reader.read(READ_BUFSIZE)
        except TimeoutError:
            return None

    def close(self) -> None:
        """Release the connection."""
        self._closed = True
        if not self._writer.is_closing():
            self._writer.close()

    async def wait_closed(self) -> None:
        """Wait until the connection is released."""
        with suppress(OSError):
            await self._writer.wait_closed()


async def run_session(
    session: Session,
    dispatcher: CommandDispatcher,
    cancellation: CancellationToken,
    welcome: str,
) -> None:
    """Serve a client until it disconnects, fails or shutdown is requested."""
    logger = session.logger
    await session.send(welcome)
    try:
        while not session.closed:
            if cancellation.cancelled:
                logger.debug("Shutdown requested, closing session with %s", session.address)
                break
            try:
                data = await session.receive()
            except OSError as err:
                logger.debug("Error while reading from %s: %s", session.address, err)
                break
            if data is None:
                # nothing received, poll again
                continue
            if not data:
                logger.info("Client %s closed connection", session.address)
                break
            session.lines_received += 1
            raw_line = data.decode(ENCODING, errors="replace")
            logger.debug(
                "Received %s bytes from %s: %r",
                len(data),
                session.address,
                raw_line,
            )
            await dispatcher.dispatch(session, parse_line(raw_line))
    finally:
        session.close()
