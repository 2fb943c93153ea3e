"""
Snippet Manager Backend — Server Runner
=========================================

What:  Runs the FastAPI app under uvicorn with the configured timeouts.
How:   A uvicorn.Server subclass records SHUTTING_DOWN on app.state as soon
       as SIGINT/SIGTERM arrives; uvicorn then stops accepting connections,
       lets in-flight requests finish for `shutdown_grace_period` seconds,
       and runs the lifespan shutdown that releases MongoDB.
Who:   `snippet-manager` console script and `python -m snippet_manager`.

Exit codes:
    0  clean shutdown
    1  missing configuration or the listener could not start
    3  application startup failed (e.g. MongoDB unreachable)
"""

import logging
import signal
from typing import Optional

import uvicorn
from fastapi import FastAPI

from snippet_manager.config import settings
from snippet_manager.exceptions import ConfigurationError
from snippet_manager.main import LifecycleState, setup_logging, app as default_app

logger = logging.getLogger(__name__)

STARTUP_FAILURE = 3


class SnippetServer(uvicorn.Server):
    """uvicorn server that mirrors its shutdown on the app's lifecycle state."""

    def __init__(self, config: uvicorn.Config, app: FastAPI):
        super().__init__(config)
        self.app = app

    def handle_exit(self, sig: int, frame) -> None:
        if self.app.state.lifecycle == LifecycleState.SERVING:
            logger.info(
                "Received %s, shutting down server (grace period %ds)...",
                signal.Signals(sig).name,
                settings.shutdown_grace_period,
            )
            self.app.state.lifecycle = LifecycleState.SHUTTING_DOWN
        super().handle_exit(sig, frame)


def build_config(app: FastAPI) -> uvicorn.Config:
    return uvicorn.Config(
        app,
        host=settings.backend_host,
        port=settings.backend_port,
        timeout_keep_alive=settings.idle_timeout,
        timeout_graceful_shutdown=settings.shutdown_grace_period,
        log_config=None,
        access_log=False,
        lifespan="on",
    )


def main(app: Optional[FastAPI] = None) -> int:
    """Validate configuration, serve until interrupted, return an exit code."""
    setup_logging()

    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.critical(e.message)
        return 1

    if app is None:
        app = default_app

    server = SnippetServer(build_config(app), app)
    logger.info("Listening on %s:%d", settings.backend_host, settings.backend_port)
    try:
        server.run()
    except SystemExit as e:
        # uvicorn exits this way when the socket cannot be bound
        logger.error("listen: server failed to start on port %d", settings.backend_port)
        return e.code if isinstance(e.code, int) else 1

    if not server.started:
        logger.error("Application startup failed; see the errors above")
        return STARTUP_FAILURE
    return 0
