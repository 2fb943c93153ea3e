"""
Snippet Manager Backend — Lifecycle & Configuration Tests
===========================================================

What:  Tests for settings validation, the app lifespan, and the server runner.
How:   Drives the lifespan context directly (no real server or database).

What we test:
    ✅ missing MONGODB_URI is a configuration error
    ✅ lifespan walks STARTING → SERVING → SHUTTING_DOWN → STOPPED and
       releases the storage connection
    ✅ a failed MongoDB connection aborts startup
    ✅ an interrupt marks the app SHUTTING_DOWN and asks uvicorn to exit
"""

import signal
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import ServerSelectionTimeoutError

from snippet_manager.config import Settings, settings
from snippet_manager.exceptions import ConfigurationError, StorageConnectionError
from snippet_manager.main import LifecycleState, create_app, lifespan
from snippet_manager.server import SnippetServer, build_config, main
from snippet_manager.storage import MongoStorage

from conftest import FakeMotorClient


class TestSettings:

    def test_missing_uri_fails_validation(self):
        with pytest.raises(ConfigurationError, match="MONGODB_URI"):
            Settings(mongodb_uri="").validate_required()

    def test_uri_present_passes(self):
        Settings(mongodb_uri="mongodb://localhost:27017").validate_required()

    def test_defaults_match_deployment(self):
        s = Settings(mongodb_uri="mongodb://x")
        assert s.mongodb_database == "Code-Snippet-Manager"
        assert s.mongodb_collection == "code-snippets"
        assert s.api_prefix == "/code-snippets"
        assert s.backend_port == 9000
        assert s.idle_timeout == 60
        assert s.shutdown_grace_period == 5

    def test_api_prefix_normalized(self):
        assert Settings(api_prefix="/snippets/").api_prefix == "/snippets"

    def test_api_prefix_must_be_absolute(self):
        with pytest.raises(PydanticValidationError):
            Settings(api_prefix="snippets")

    def test_log_level_validated(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(PydanticValidationError):
            Settings(log_level="LOUD")


class TestLifespan:

    @pytest.mark.asyncio
    async def test_states_and_connection_release(self):
        client = FakeMotorClient()
        storage = MongoStorage(
            "mongodb://fake", "db", "code-snippets", client_factory=lambda *a, **kw: client
        )
        app = create_app(storage=storage)

        assert app.state.lifecycle == LifecycleState.STARTING
        async with lifespan(app):
            assert app.state.lifecycle == LifecycleState.SERVING
            assert storage.is_connected

        assert app.state.lifecycle == LifecycleState.STOPPED
        assert not storage.is_connected
        assert client.closed

    @pytest.mark.asyncio
    async def test_missing_uri_aborts_startup(self, monkeypatch):
        monkeypatch.setattr(settings, "mongodb_uri", "")
        app = create_app()

        with pytest.raises(ConfigurationError):
            async with lifespan(app):
                pass

    @pytest.mark.asyncio
    async def test_unreachable_database_aborts_startup(self):
        client = FakeMotorClient()
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        storage = MongoStorage(
            "mongodb://fake", "db", "code-snippets", client_factory=lambda *a, **kw: client
        )
        app = create_app(storage=storage)

        with pytest.raises(StorageConnectionError):
            async with lifespan(app):
                pass
        assert app.state.lifecycle == LifecycleState.STARTING


class TestServer:

    def test_config_uses_timeouts(self):
        app = create_app()
        config = build_config(app)

        assert config.timeout_keep_alive == settings.idle_timeout
        assert config.timeout_graceful_shutdown == settings.shutdown_grace_period

    def test_interrupt_marks_shutting_down(self):
        app = create_app()
        app.state.lifecycle = LifecycleState.SERVING
        server = SnippetServer(build_config(app), app)

        server.handle_exit(signal.SIGINT, None)

        assert app.state.lifecycle == LifecycleState.SHUTTING_DOWN
        assert server.should_exit

    def test_main_exits_nonzero_without_uri(self, monkeypatch):
        monkeypatch.setattr(settings, "mongodb_uri", "")

        assert main() == 1
