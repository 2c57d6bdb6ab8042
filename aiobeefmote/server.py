"""Remote control server embedded in the host media player."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import suppress
import logging
import socket
import threading
from types import TracebackType
from typing import Self

from async_timeout import timeout

from .cancellation import CancellationToken
from .commands import CommandDispatcher, CommandId, RemoteCommands
from .const import CONF_DISABLE, WAIT_CLIENT
from .listener import resolve_config, start_listening
from .models import ServerState
from .notify import BRIDGE_EVENTS, NotificationBridge
from .player import PlayerControl
from .session import Session, run_session


class RemoteServer:
    """
    Serve the remote control protocol to one client at a time.

    A single worker thread runs a private event loop which owns the listening
    socket, the client connection and every write to it. The host reaches the
    server through its event callbacks, which hand messages over to that loop.
    """

    def __init__(
        self,
        player: PlayerControl,
        ip_address: str | None = None,
        port: int | None = None,
    ) -> None:
        """
        Initialize RemoteServer instance.

        Params:
        - player: the host player to control and to receive events from.
        - ip_address: IP to bind to, None = take it from the host configuration
          (empty there means all interfaces).
        - port: port to bind to, None = take it from the host configuration
          (empty there means the default port), 0 = autoselect.
        """
        self.logger = logging.getLogger(__name__)
        self.player = player
        self.ip_address = ip_address
        self.port = port
        self.state = ServerState()
        self.cancellation = CancellationToken()
        self.commands = RemoteCommands(player, self.state)
        self.dispatcher = CommandDispatcher(
            self.commands.registry,
            self.logger.getChild("commands"),
        )
        self.bridge = NotificationBridge(
            player,
            self.state,
            self.notify_client,
            self.logger.getChild("bridge"),
        )
        self._listener: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._unsub_callback: Callable | None = None
        # guards the session/loop pair shared with the host's event threads
        self._session_lock = threading.Lock()
        self._session: Session | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def welcome(self) -> str:
        """Return the message sent to every new client."""
        help_name = self.commands.registry[CommandId.HELP].name
        return (
            "Hello! Welcome to Beefmote's server. "
            f'Type "{help_name}" for a list of available commands\n'
        )

    @property
    def bound_port(self) -> int | None:
        """Return the port the server listens on, None when unbound."""
        if self._listener is None:
            return None
        return self._listener.getsockname()[1]

    @property
    def running(self) -> bool:
        """Return True while the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def client_connected(self) -> bool:
        """Return True while a client session is active."""
        with self._session_lock:
            return self._session is not None and not self._session.closed

    def start(self) -> None:
        """Start listening and serving in the worker thread."""
        if self._thread is not None:
            return
        # a previous stop() leaves its token cancelled
        self.cancellation = CancellationToken()
        if self.player.conf_get_str(CONF_DISABLE, "0").strip() == "1":
            self.logger.info("Remote control disabled in config")
            return
        config = resolve_config(self.player, self.ip_address, self.port)
        self._listener = start_listening(config)
        if self._listener is not None:
            self.logger.info(
                "Remote control listening on %s:%s",
                config.host or "(all interfaces)",
                self.bound_port,
            )
        else:
            self.logger.error("Remote control unbound, no client will be able to connect")
        self._unsub_callback = self.player.subscribe(
            self.bridge.on_player_event,
            BRIDGE_EVENTS,
        )
        self._thread = threading.Thread(
            target=self._run,
            name="beefmote",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker and wait for it to exit before releasing resources."""
        self.cancellation.cancel()
        thread = self._thread
        if thread is None:
            return
        if thread is threading.current_thread():
            # requested by a command handler, the worker exits on its own
            return
        thread.join()
        self._thread = None
        self._cleanup()
        self.logger.info("Remote control stopped")

    def notify_client(self, text: str) -> bool:
        """
        Queue an unsolicited message for the connected client.

        Safe to call from any thread. Returns False if no client is connected.
        """
        with self._session_lock:
            session, loop = self._session, self._loop
            if session is None or loop is None or session.closed:
                return False
            coro = session.send(text)
            try:
                asyncio.run_coroutine_threadsafe(coro, loop)
            except RuntimeError:
                # worker loop already shut down
                coro.close()
                return False
        return True

    def _run(self) -> None:
        """Worker thread entry point."""
        try:
            asyncio.run(self._serve())
        finally:
            self._close_listener()

    async def _serve(self) -> None:
        """Accept clients one at a time until shutdown is requested."""
        loop = asyncio.get_running_loop()
        with self._session_lock:
            self._loop = loop
        try:
            while not self.cancellation.cancelled:
                if self._listener is None:
                    # unbound: nothing to accept, keep idling
                    await asyncio.sleep(WAIT_CLIENT)
                    continue
                try:
                    async with timeout(WAIT_CLIENT):
                        conn, address = await loop.sock_accept(self._listener)
                except TimeoutError:
                    continue
                except OSError as err:
                    self.logger.debug("Error while accepting client: %s", err)
                    await asyncio.sleep(WAIT_CLIENT)
                    continue
                await self._handle_client(conn, address)
        finally:
            with self._session_lock:
                self._loop = None

    async def _handle_client(self, conn: socket.socket, address: tuple) -> None:
        """Serve a freshly accepted client until its session ends."""
        self.logger.info("Got connection from %s", address[0])
        try:
            reader, writer = await asyncio.open_connection(sock=conn)
        except OSError as err:
            self.logger.debug("Error while setting up connection: %s", err)
            conn.close()
            return
        session = Session(reader, writer, self.logger.getChild("session"))
        with self._session_lock:
            self._session = session
        try:
            await run_session(session, self.dispatcher, self.cancellation, self.welcome)
        finally:
            with self._session_lock:
                self._session = None
            session.close()
            await session.wait_closed()
            self.logger.debug(
                "Session with %s ended after %s lines",
                address[0],
                session.lines_received,
            )

    def _close_listener(self) -> None:
        if self._listener is not None:
            with suppress(OSError):
                self._listener.close()
            self._listener = None

    def _cleanup(self) -> None:
        self._close_listener()
        if self._unsub_callback:
            self._unsub_callback()
            self._unsub_callback = None
        self.state.reset()

    def __enter__(self) -> Self:
        """Return Context manager."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        """Exit context manager."""
        self.stop()
        return None
