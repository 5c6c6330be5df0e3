"""
Remote Control Channel - receives commands over a WebSocket.

The channel owns exactly one connection. Inbound frames go through a
decode -> validate -> dispatch pipeline; anything that fails is logged,
recorded as a diagnostic and dropped, and the connection stays open.

State machine:

    disconnected -> connecting -> open -> closing -> disconnected
    connecting -> disconnected   (connect failed)
    open -> disconnected         (peer closed / transport error)

Only `open` accepts frames.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Any

from websockets.asyncio.client import connect

from chuk_mcp_strudel.channel.backoff import calculate_reconnect_backoff
from chuk_mcp_strudel.constants import (
    DEFAULT_CLOSE_TIMEOUT,
    DIAGNOSTIC_HISTORY,
    ConnectionState,
    DiagnosticKind,
)
from chuk_mcp_strudel.dispatch import Dispatcher
from chuk_mcp_strudel.errors import ConnectionFailure, InvalidCommand, MalformedMessage
from chuk_mcp_strudel.models.command import Command, ErrorNotice, Notice
from chuk_mcp_strudel.models.config import ReconnectPolicy
from chuk_mcp_strudel.protocol import decode_frame

logger = logging.getLogger(__name__)

Connector = Callable[[str], AbstractAsyncContextManager[Any]]


@dataclass(frozen=True)
class Diagnostic:
    """Something the channel rejected or failed at."""

    kind: DiagnosticKind
    message: str
    error: BaseException | None = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }


class RemoteControlChannel:
    """
    Client side of the remote control connection.

    Args:
        dispatcher: Where validated commands are applied
        connector: Opens a connection for an endpoint; used as an async
            context manager yielding an object with `close()` that iterates
            over inbound frames. Defaults to websockets' client.
        reconnect: Reconnect policy (disabled by default)
        close_timeout: Upper bound in seconds for each step of `close()`
        on_diagnostic: Optional callback for every diagnostic
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        connector: Connector | None = None,
        reconnect: ReconnectPolicy | None = None,
        close_timeout: float = DEFAULT_CLOSE_TIMEOUT,
        on_diagnostic: Callable[[Diagnostic], None] | None = None,
    ):
        self.dispatcher = dispatcher
        self.reconnect = reconnect or ReconnectPolicy()
        self.close_timeout = close_timeout
        self.on_diagnostic = on_diagnostic
        self._connector = connector or self._websocket_connector
        self._state = ConnectionState.DISCONNECTED
        self._endpoint: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._websocket: Any = None
        self._closing = False
        self._opened = asyncio.Event()
        self.diagnostics: deque[Diagnostic] = deque(maxlen=DIAGNOSTIC_HISTORY)
        self.frames_received = 0
        self.commands_dispatched = 0
        self.connections = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def endpoint(self) -> str | None:
        return self._endpoint

    def _websocket_connector(self, endpoint: str) -> AbstractAsyncContextManager[Any]:
        return connect(endpoint, close_timeout=self.close_timeout)

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    async def open(self, endpoint: str) -> None:
        """
        Begin connecting to `endpoint`.

        Returns immediately; use `wait_until_open` to wait for the
        connection. Does nothing if already connecting or open.

        Raises:
            ConnectionFailure: If the channel is still closing
        """
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            logger.debug("open(%s) ignored, channel is %s", endpoint, self._state.value)
            return
        if self._state is ConnectionState.CLOSING:
            raise ConnectionFailure("Channel is closing", endpoint=endpoint)

        self._endpoint = endpoint
        self._closing = False
        self._state = ConnectionState.CONNECTING
        logger.info("Connecting to %s", endpoint)
        self._task = asyncio.create_task(self._run(endpoint), name="strudel-remote-channel")

    async def wait_until_open(self, timeout: float | None = None) -> bool:
        """Wait for the channel to open. Returns False on timeout."""
        try:
            await asyncio.wait_for(self._opened.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def wait_finished(self) -> None:
        """Wait until the connection loop gives up (peer gone, no reconnect)."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)

    async def close(self) -> None:
        """
        Close the connection and stop reconnecting.

        Always ends `disconnected`. Each step (close handshake, connection
        task shutdown) waits at most `close_timeout` seconds.
        """
        if self._task is None and self._state is ConnectionState.DISCONNECTED:
            return

        self._closing = True
        if self._state is not ConnectionState.DISCONNECTED:
            self._state = ConnectionState.CLOSING
        task, self._task = self._task, None
        websocket = self._websocket

        try:
            if websocket is not None:
                try:
                    await asyncio.wait_for(websocket.close(), timeout=self.close_timeout)
                except asyncio.TimeoutError:
                    logger.warning(
                        "Close handshake with %s timed out after %.1fs",
                        self._endpoint,
                        self.close_timeout,
                    )
                except Exception as e:
                    logger.debug("Close handshake failed: %s", e)

            if task is not None and not task.done():
                task.cancel()
                done, _ = await asyncio.wait({task}, timeout=self.close_timeout)
                if not done:
                    logger.warning("Connection task still running after %.1fs", self.close_timeout)
        finally:
            self._websocket = None
            self._opened.clear()
            self._state = ConnectionState.DISCONNECTED
            logger.info("Disconnected from %s", self._endpoint)

    # ------------------------------------------------------------------
    # Lifecycle handlers
    # ------------------------------------------------------------------

    def on_open(self) -> None:
        """The transport connected."""
        if self._state is not ConnectionState.CONNECTING:
            return
        self._state = ConnectionState.OPEN
        self.connections += 1
        self._opened.set()
        logger.info("Remote channel open (%s)", self._endpoint)

    def on_message(self, raw_frame: str | bytes) -> Command | None:
        """
        Handle one inbound frame.

        Returns:
            The command that was dispatched, or None if the frame was
            dropped, rejected or informational
        """
        if self._state is not ConnectionState.OPEN:
            logger.debug("Dropping frame received while %s", self._state.value)
            return None

        self.frames_received += 1
        try:
            message = decode_frame(raw_frame)
        except MalformedMessage as e:
            self._report(DiagnosticKind.MALFORMED_MESSAGE, str(e), e)
            return None
        except InvalidCommand as e:
            self._report(DiagnosticKind.INVALID_COMMAND, str(e), e)
            return None

        if isinstance(message, Notice):
            logger.info("Remote notice: %s", message.text)
            return None
        if isinstance(message, ErrorNotice):
            logger.warning("Remote error: %s", message.message)
            return None

        logger.debug("Dispatching remote %s", message)
        try:
            self.dispatcher.apply(message)
        except Exception as e:
            logger.exception("Evaluator failed on remote %s", message)
            self._record(Diagnostic(DiagnosticKind.EVALUATION_FAILURE, str(e), e))
        else:
            self.commands_dispatched += 1
        return message

    def on_close(self) -> None:
        """The peer closed the connection."""
        self._disconnected()
        if not self._closing:
            logger.info("Remote channel closed by peer (%s)", self._endpoint)

    def on_error(self, error: BaseException) -> None:
        """The transport failed to connect or broke."""
        self._disconnected()
        if not self._closing:
            self._report(
                DiagnosticKind.CONNECTION_FAILURE,
                f"{self._endpoint}: {type(error).__name__}: {error}",
                ConnectionFailure(str(error), endpoint=self._endpoint),
            )

    def status(self) -> dict[str, Any]:
        """Snapshot of the channel for status reports."""
        return {
            "state": self._state.value,
            "endpoint": self._endpoint,
            "connections": self.connections,
            "frames_received": self.frames_received,
            "commands_dispatched": self.commands_dispatched,
            "reconnect": self.reconnect.enabled,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(self, endpoint: str) -> None:
        """Connection loop. The socket is scoped to one `async with` per attempt."""
        attempt = 0
        while True:
            try:
                async with self._connector(endpoint) as websocket:
                    self._websocket = websocket
                    self.on_open()
                    attempt = 0
                    async for raw_frame in websocket:
                        self.on_message(raw_frame)
                        if self._state is not ConnectionState.OPEN:
                            break
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.on_error(e)
            else:
                self.on_close()
            finally:
                self._websocket = None

            if self._closing or not self.reconnect.enabled:
                return

            delay = calculate_reconnect_backoff(
                attempt,
                base_seconds=self.reconnect.base_seconds,
                max_seconds=self.reconnect.max_seconds,
            )
            attempt += 1
            self._state = ConnectionState.CONNECTING
            logger.info("Reconnecting to %s in %.1fs (attempt %d)", endpoint, delay, attempt)
            await asyncio.sleep(delay)

    def _disconnected(self) -> None:
        self._opened.clear()
        if self._state is not ConnectionState.CLOSING:
            self._state = ConnectionState.DISCONNECTED

    def _report(self, kind: DiagnosticKind, message: str, error: BaseException) -> None:
        logger.warning("%s: %s", kind.value, message)
        self._record(Diagnostic(kind, message, error))

    def _record(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self.on_diagnostic is not None:
            try:
                self.on_diagnostic(diagnostic)
            except Exception:
                logger.exception("Diagnostic callback failed")
