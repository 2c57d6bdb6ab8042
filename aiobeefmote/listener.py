"""Listening socket of the remote control server."""

from __future__ import annotations

from dataclasses import dataclass
import ipaddress
import logging
import socket
from typing import TYPE_CHECKING

from .const import CONF_IP, CONF_PORT, DEFAULT_PORT, LISTEN_BACKLOG

if TYPE_CHECKING:
    from .player import PlayerControl

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListenerConfig:
    """Address to bind the listening socket to. Empty host means all interfaces."""

    host: str = ""
    port: int = DEFAULT_PORT

    @property
    def family(self) -> socket.AddressFamily:
        """Return the address family matching host."""
        if self.host and ipaddress.ip_address(self.host).version == 6:
            return socket.AF_INET6
        return socket.AF_INET


def resolve_address(raw_value: str | None) -> str:
    """Validate a configured bind address, falling back to all interfaces."""
    value = (raw_value or "").strip()
    if not value:
        return ""
    try:
        ipaddress.ip_address(value)
    except ValueError:
        LOGGER.warning(
            "Invalid IP address in config: %s, defaulting to all interfaces",
            value,
        )
        return ""
    return value


def resolve_port(raw_value: str | int | None) -> int:
    """Validate a configured port, falling back to the default port."""
    if isinstance(raw_value, int):
        port = raw_value
    else:
        value = (raw_value or "").strip()
        if not value:
            return DEFAULT_PORT
        try:
            port = int(value, 10)
        except ValueError:
            LOGGER.warning(
                "Invalid port in config: %s, defaulting to %s",
                value,
                DEFAULT_PORT,
            )
            return DEFAULT_PORT
    if not 0 <= port <= 65535:
        LOGGER.warning(
            "Port out of range in config: %s, defaulting to %s",
            port,
            DEFAULT_PORT,
        )
        return DEFAULT_PORT
    return port


def resolve_config(
    player: PlayerControl,
    ip_address: str | None = None,
    port: int | None = None,
) -> ListenerConfig:
    """
    Resolve the bind address from explicit settings or the host configuration.

    Explicit values win over the host configuration. An empty address binds all
    interfaces, an empty port binds the default port.
    """
    if ip_address is None:
        ip_address = player.conf_get_str(CONF_IP, "")
    if port is None:
        raw_port: str | int = player.conf_get_str(CONF_PORT, "")
    else:
        raw_port = port
    config = ListenerConfig(resolve_address(ip_address), resolve_port(raw_port))
    LOGGER.debug(
        "Resolved bind address: %s:%s",
        config.host or "(all interfaces)",
        config.port,
    )
    return config


def start_listening(config: ListenerConfig) -> socket.socket | None:
    """
    Create the non-blocking listening socket.

    Returns None when the socket can't be set up; the server then stays
    unbound and no client can connect.
    """
    try:
        sock = socket.socket(config.family, socket.SOCK_STREAM)
    except OSError as err:
        LOGGER.error("Couldn't create socket: %s", err)
        return None
    try:
        # reuse address, the player may be closed and reopened quickly
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    except OSError as err:
        LOGGER.warning("Couldn't set SO_REUSEADDR: %s", err)
    try:
        sock.setblocking(False)
        sock.bind((config.host, config.port))
        sock.listen(LISTEN_BACKLOG)
    except OSError as err:
        LOGGER.error(
            "Couldn't listen on %s:%s: %s",
            config.host or "(all interfaces)",
            config.port,
            err,
        )
        sock.close()
        return None
    return sock
