"""
Process entry point and HTTP listener lifecycle.

The listener (a uvicorn server) runs on a background thread while the main
thread waits for SIGINT/SIGTERM. The first signal starts a graceful shutdown
bounded by SHUTDOWN_TIMEOUT; a second signal forces the exit.

Usage:
    todoapi
    python -m todoapi.server
"""
from __future__ import annotations

import logging
import os
import signal
import sys
import threading
import time
from enum import Enum
from typing import Any, Dict, Iterable, Optional

import uvicorn
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from .logging_config import configure_logging
from .main import create_app
from .repositories import get_repository
from .settings import Settings, get_settings, load_env_file

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LifecycleState(str, Enum):
    STARTING = "starting"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    EXITED = "exited"


# PUBLIC_INTERFACE
def build_server(app: FastAPI, settings: Settings) -> uvicorn.Server:
    """
    Configure a uvicorn server for `app`.

    - read/keep-alive timeout: settings.read_timeout
    - maximum request head: settings.max_header_bytes (h11 only)
    - graceful timeout: settings.shutdown_timeout
    """
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        http="h11",
        lifespan="off",
        timeout_keep_alive=settings.read_timeout,
        timeout_graceful_shutdown=settings.shutdown_timeout,
        h11_max_incomplete_event_size=settings.max_header_bytes,
        log_config=None,
    )
    return uvicorn.Server(config)


# PUBLIC_INTERFACE
class LifecycleController:
    """
    Owns the listener from startup to exit: STARTING -> SERVING -> SHUTTING_DOWN -> EXITED.

    `server` is anything with a blocking run() and the uvicorn-style
    `should_exit` / `force_exit` flags.
    """

    def __init__(
        self,
        server: Any,
        shutdown_timeout: float = 5.0,
        signals: Iterable[int] = DEFAULT_SIGNALS,
    ) -> None:
        self._server = server
        self._shutdown_timeout = shutdown_timeout
        self._signals = tuple(signals)
        # Reentrant: signal handlers run on the main thread, which may already hold it.
        self._lock = threading.RLock()
        self._shutdown_requested = threading.Event()
        self._forced = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._previous_handlers: Dict[int, Any] = {}
        self.state = LifecycleState.STARTING
        self.exit_code = 0

    @property
    def server(self) -> Any:
        return self._server

    def install_signal_handlers(self) -> None:
        """Must be called from the main thread."""
        for sig in self._signals:
            self._previous_handlers[sig] = signal.signal(sig, self.handle_signal)

    def restore_signal_handlers(self) -> None:
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        self._previous_handlers.clear()

    def handle_signal(self, signum: int, frame: Any = None) -> None:
        logger.info("Received %s", signal.Signals(signum).name)
        self.request_shutdown()

    def request_shutdown(self) -> None:
        """First call begins a graceful shutdown; any later call forces the exit."""
        with self._lock:
            first = self.state in (LifecycleState.STARTING, LifecycleState.SERVING)
            if first:
                self.state = LifecycleState.SHUTTING_DOWN
        if not first:
            self.force_exit()
            return
        logger.info("Shutting down gracefully, press Ctrl+C again to force")
        self._server.should_exit = True
        self._shutdown_requested.set()

    def force_exit(self) -> None:
        logger.warning("Forced exit requested; abandoning in-flight requests")
        self._server.force_exit = True
        self._server.should_exit = True
        self.exit_code = 1
        self._forced.set()
        self._shutdown_requested.set()

    def start(self) -> None:
        """Begin serving on a background thread and return immediately."""
        with self._lock:
            if self.state is not LifecycleState.STARTING or self._thread is not None:
                raise RuntimeError("listener already started")
            self._thread = threading.Thread(target=self._serve, name="todoapi-http", daemon=True)
        self._thread.start()
        with self._lock:
            if self.state is LifecycleState.STARTING:
                self.state = LifecycleState.SERVING

    def _serve(self) -> None:
        try:
            self._server.run()
        except SystemExit as exc:
            # uvicorn exits this way when it cannot bind
            logger.error("listen: server exited during startup (status %s)", exc.code)
        except Exception:
            logger.exception("listen: server crashed")
        finally:
            if not self._shutdown_requested.is_set():
                logger.error("listen: server stopped without a shutdown request")
                with self._lock:
                    if self.state in (LifecycleState.STARTING, LifecycleState.SERVING):
                        self.state = LifecycleState.SHUTTING_DOWN
                self.exit_code = 1
                self._shutdown_requested.set()

    def wait(self) -> int:
        """
        Block until shutdown is requested, then until the listener drains or
        the ceiling elapses. Returns the process exit code.
        """
        # Short waits keep the main thread responsive to signal handlers.
        while not self._shutdown_requested.wait(0.2):
            pass

        thread = self._thread
        deadline = time.monotonic() + self._shutdown_timeout
        while thread is not None and thread.is_alive() and not self._forced.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            thread.join(min(remaining, 0.1))

        if thread is not None and thread.is_alive():
            if not self._forced.is_set():
                logger.error(
                    "Server forced to shutdown: requests still in flight after %.1fs",
                    self._shutdown_timeout,
                )
                self._server.force_exit = True
                self.exit_code = 1
            thread.join(1.0)

        with self._lock:
            self.state = LifecycleState.EXITED
        logger.info("Server exiting")
        return self.exit_code

    def run(self) -> int:
        """Install signal handlers, serve, and block until exit."""
        self.install_signal_handlers()
        try:
            self.start()
            return self.wait()
        finally:
            self.restore_signal_handlers()


# PUBLIC_INTERFACE
def main() -> int:
    """
    Console entry point: load .env, open the database, serve until signalled.

    A database that cannot be opened is fatal and no listener is started.
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    load_env_file(".env")
    settings = get_settings()
    logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

    try:
        repository = get_repository(settings)
    except (SQLAlchemyError, OSError) as exc:
        logger.critical("failed to connect database: %s", exc)
        return 1

    app = create_app(settings=settings, repository=repository)
    controller = LifecycleController(
        build_server(app, settings),
        shutdown_timeout=settings.shutdown_timeout,
    )
    logger.info("Listening on %s:%d", settings.host, settings.port)
    return controller.run()


if __name__ == "__main__":
    sys.exit(main())
