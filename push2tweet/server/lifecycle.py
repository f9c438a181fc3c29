"""Server lifecycle: start/stop, proof-of-life heartbeat and graceful exit."""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import signal
import socket
from collections.abc import Iterator
from typing import Any

import uvicorn
from fastapi import FastAPI

from push2tweet import __version__
from push2tweet.context import server_context
from push2tweet.errors import StartupError
from push2tweet.models import OperationType, ServerState, Settings
from push2tweet.server.app import create_app
from push2tweet.server.kpis import ServerKPIs
from push2tweet.settings import redacted

logger = logging.getLogger(__name__)

# Pause before exiting so the last log lines are flushed
EXIT_DELAY_SECONDS = 0.5


class _UvicornServer(uvicorn.Server):
    """uvicorn server leaving signal handling to Push2TweetServer."""

    def install_signal_handlers(self) -> None:
        return

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class Push2TweetServer:
    """Owns the HTTP listener, the heartbeat and the KPI counter."""

    def __init__(
        self,
        settings: Settings,
        app: FastAPI | None = None,
        kpis: ServerKPIs | None = None,
    ) -> None:
        self.settings = settings
        self.kpis = kpis if kpis is not None else ServerKPIs()
        self.app = app or create_app(settings, kpis=self.kpis, on_fault=self.report_fault)
        self.state = ServerState.STOPPED
        self._socket: socket.socket | None = None
        self._uvicorn: _UvicornServer | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._shutdown_requested = asyncio.Event()
        self._fault: BaseException | None = None

    @property
    def port(self) -> int | None:
        """Port actually bound, which differs from settings when it is 0."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    async def start(self) -> None:
        if self.state in (ServerState.STARTING, ServerState.RUNNING):
            return

        self.state = ServerState.STARTING
        startup = server_context(OperationType.STARTUP)
        logger.info("Starting up push2tweet server version %s...", __version__, extra=startup)
        logger.debug("push2tweet configuration: %s", redacted(self.settings), extra=startup)

        try:
            self._socket = self._bind()
        except StartupError:
            self.state = ServerState.STOPPED
            raise

        config = uvicorn.Config(self.app, log_config=None, access_log=False, lifespan="off")
        self._uvicorn = _UvicornServer(config)
        self._serve_task = asyncio.create_task(self._uvicorn.serve(sockets=[self._socket]))
        while not self._uvicorn.started:
            if self._serve_task.done():
                self._release()
                raise StartupError("HTTP server exited during start-up")
            await asyncio.sleep(0.01)

        self.state = ServerState.RUNNING
        logger.info(
            "Server started at http://%s:%d...", self.settings.host, self.port,
            extra=server_context(OperationType.SERVER_START),
        )
        self._heartbeat_task = asyncio.create_task(self._heartbeat())

    async def stop(self) -> None:
        if self.state is ServerState.STOPPED:
            return

        stopping = server_context(OperationType.SERVER_STOP)
        logger.info("Stopping the push2tweet server...", extra=stopping)
        self.state = ServerState.STOPPING

        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
        if self._uvicorn is not None:
            self._uvicorn.should_exit = True
        if self._serve_task is not None:
            await self._serve_task

        self._release()
        logger.info("HTTP server successfully stopped", extra=stopping)

    def _release(self) -> None:
        if self._socket is not None:
            self._socket.close()
        self._socket = None
        self._uvicorn = None
        self._serve_task = None
        self._heartbeat_task = None
        self.state = ServerState.STOPPED

    def _bind(self) -> socket.socket:
        host, port = self.settings.host, self.settings.port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            message = f"Failed to listen on {host}:{port}: {exc}"
            if exc.errno == errno.EADDRINUSE:
                message += (
                    " (another push2tweet instance may already be listening"
                    " on the same port)"
                )
            raise StartupError(message) from exc
        sock.set_inheritable(True)
        return sock

    # --- Heartbeat ---

    def tick(self) -> int:
        """Log the proof-of-life line and reset the KPI counter."""
        attended = self.kpis.reset()
        logger.info(
            "Everything OK, %d requests attended in the last %ds interval...",
            attended, self.settings.proof_of_life_interval,
            extra=server_context(),
        )
        return attended

    async def _heartbeat(self) -> None:
        while True:
            await asyncio.sleep(self.settings.proof_of_life_interval)
            self.tick()

    # --- Process-level shutdown ---

    def request_shutdown(self) -> None:
        self._shutdown_requested.set()

    def report_fault(self, exc: BaseException) -> None:
        """Record an uncaught fault and request shutdown with exit code 1."""
        if self._fault is None:
            self._fault = exc
        self._shutdown_requested.set()

    def _on_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any],
    ) -> None:
        loop.default_exception_handler(context)
        # Context-only reports (e.g. a pending task destroyed) are not faults
        exc = context.get("exception")
        if exc is not None:
            self.report_fault(exc)

    async def exit_gracefully(self, err: BaseException | None = None) -> int:
        """Stop everything and return the process exit code."""
        shutdown = server_context(OperationType.SHUTDOWN)
        if err is not None:
            logger.error("%s", err, extra=shutdown)

        await self.stop()

        if err is None:
            logger.info("Application exited successfully", extra=shutdown)
        await asyncio.sleep(EXIT_DELAY_SECONDS)
        return 1 if err is not None else 0

    async def serve_forever(self) -> int:
        """Run until SIGINT/SIGTERM or a fault; return the exit code."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_shutdown)
        loop.set_exception_handler(self._on_loop_exception)

        try:
            await self.start()
        except StartupError as exc:
            return await self.exit_gracefully(exc)

        await self._shutdown_requested.wait()
        return await self.exit_gracefully(self._fault)
