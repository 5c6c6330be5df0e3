"""
Control bridge - broadcasts commands to connected players.

Players connect to `ws://host:port/ws`. Each one is greeted with a hello
notice and then receives every frame passed to `broadcast`, in order.
Every player has its own bounded queue: when a slow player falls behind,
its oldest frames are dropped and it is told how many it missed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from http import HTTPStatus

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from chuk_mcp_strudel.constants import (
    DEFAULT_BRIDGE_HOST,
    DEFAULT_BRIDGE_PORT,
    DEFAULT_BROADCAST_CAPACITY,
    DEFAULT_SOCKET_PATH,
    HELLO_TEXT,
    ErrorMessages,
)
from chuk_mcp_strudel.errors import StrudelControlError
from chuk_mcp_strudel.models.command import Command, ErrorNotice, Notice
from chuk_mcp_strudel.models.config import BridgeConfig
from chuk_mcp_strudel.protocol import encode_message

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Player:
    """One connected player and its outbound queue."""

    remote: str
    queue: asyncio.Queue[str]
    lagged: int = 0
    sent: int = 0

    def offer(self, frame: str) -> None:
        try:
            self.queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.queue.get_nowait()
            self.lagged += 1
            self.queue.put_nowait(frame)


class ControlBridge:
    """
    WebSocket server that fans commands out to players.

    Args:
        host: Bind address (loopback by default; there is no authentication)
        port: Port, 0 picks a free one
        path: The only path that accepts WebSocket upgrades
        capacity: Frames buffered per player before the oldest is dropped
    """

    def __init__(
        self,
        host: str = DEFAULT_BRIDGE_HOST,
        port: int = DEFAULT_BRIDGE_PORT,
        path: str = DEFAULT_SOCKET_PATH,
        capacity: int = DEFAULT_BROADCAST_CAPACITY,
    ):
        self.host = host
        self.requested_port = port
        self.path = path
        self.capacity = capacity
        self._server: Server | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._players: set[_Player] = set()
        self.broadcasts = 0

    @classmethod
    def from_config(cls, config: BridgeConfig) -> ControlBridge:
        return cls(
            host=config.host,
            port=config.port,
            path=config.path,
            capacity=config.capacity,
        )

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int | None:
        """The bound port, or None if not running."""
        if self._server is None:
            return None
        for sock in self._server.sockets:
            return int(sock.getsockname()[1])
        return None

    @property
    def url(self) -> str | None:
        port = self.port
        if port is None:
            return None
        return f"ws://{self.host}:{port}{self.path}"

    @property
    def client_count(self) -> int:
        return len(self._players)

    async def start(self) -> str:
        """
        Start listening.

        Returns:
            The WebSocket URL players should connect to

        Raises:
            StrudelControlError: If already running, or no socket was bound
        """
        if self._server is not None:
            raise StrudelControlError(ErrorMessages.BRIDGE_ALREADY_RUNNING.format(port=self.port))

        self._loop = asyncio.get_running_loop()
        self._server = await serve(
            self._handle_player,
            self.host,
            self.requested_port,
            process_request=self._check_path,
        )
        url = self.url
        if url is None:
            await self.stop()
            raise StrudelControlError(ErrorMessages.BRIDGE_NO_SOCKET)
        logger.info("Control bridge listening on %s", url)
        return url

    async def stop(self) -> None:
        """Close every player connection and stop listening."""
        server, self._server = self._server, None
        if server is None:
            return
        server.close()
        await server.wait_closed()
        self._players.clear()
        logger.info("Control bridge stopped")

    def broadcast(self, message: Command | Notice | ErrorNotice) -> int:
        """
        Queue a frame for every connected player.

        Safe to call from other threads; the frame is handed to the
        bridge's event loop.

        Returns:
            Number of players the frame was queued for

        Raises:
            StrudelControlError: If the bridge is not running
        """
        if self._server is None or self._loop is None:
            raise StrudelControlError(ErrorMessages.BRIDGE_NOT_RUNNING)

        frame = encode_message(message)
        self.broadcasts += 1
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._fan_out(frame)
        else:
            self._loop.call_soon_threadsafe(self._fan_out, frame)
        return len(self._players)

    def status(self) -> dict[str, object]:
        return {
            "running": self.running,
            "url": self.url,
            "port": self.port,
            "clients": self.client_count,
            "broadcasts": self.broadcasts,
        }

    def _fan_out(self, frame: str) -> None:
        for player in list(self._players):
            player.offer(frame)

    def _check_path(self, connection: ServerConnection, request: Request) -> Response | None:
        if request.path.split("?", 1)[0] != self.path:
            logger.debug("Rejecting upgrade on %s", request.path)
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
        return None

    async def _handle_player(self, connection: ServerConnection) -> None:
        remote = str(connection.remote_address)
        try:
            await connection.send(encode_message(Notice(text=HELLO_TEXT)))
        except ConnectionClosed:
            return

        player = _Player(remote=remote, queue=asyncio.Queue(maxsize=self.capacity))
        self._players.add(player)
        logger.info("Player connected: %s (%d total)", remote, len(self._players))
        pump = asyncio.create_task(self._pump(connection, player))
        try:
            async for frame in connection:
                logger.debug("Ignoring frame from player %s: %.80r", remote, frame)
        except ConnectionClosed as e:
            logger.debug("Player %s connection error: %s", remote, e)
        finally:
            self._players.discard(player)
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump
            logger.info("Player disconnected: %s", remote)

    async def _pump(self, connection: ServerConnection, player: _Player) -> None:
        try:
            while True:
                frame = await player.queue.get()
                if player.lagged:
                    count, player.lagged = player.lagged, 0
                    notice = ErrorNotice(message=ErrorMessages.LAGGED.format(count=count))
                    await connection.send(encode_message(notice))
                await connection.send(frame)
                player.sent += 1
        except ConnectionClosed:
            return
