"""Tests for the MongoDB client setup and logging configuration."""

from __future__ import annotations

import logging

import pytest

from app.core import logger as logger_module
from app.core.config import settings
from app.db import client as client_module
from conftest import FakeDatabase


class RecordingMotorClient:
    def __init__(self, uri, **options):
        self.uri = uri
        self.options = options
        self.database = FakeDatabase()
        self.closed = False

    def __getitem__(self, name):
        return self.database

    def close(self):
        self.closed = True


class TestInitMongo:
    @pytest.mark.asyncio
    async def test_client_is_created_with_timeouts(self, monkeypatch) -> None:
        monkeypatch.setattr(client_module, "AsyncIOMotorClient", RecordingMotorClient)
        monkeypatch.setattr(settings, "MONGODB_TIMEOUT_MS", 2500)

        await client_module.init_mongo()
        try:
            options = client_module.client.options
            assert options["serverSelectionTimeoutMS"] == 2500
            assert options["connectTimeoutMS"] == 2500
            assert options["socketTimeoutMS"] == 2500
            assert client_module.get_db() is client_module.client.database
        finally:
            motor_client = client_module.client
            await client_module.close_mongo()

        assert motor_client.closed
        with pytest.raises(RuntimeError):
            client_module.get_db()


class TestSetupLogging:
    def test_defaults_to_configured_level(self, monkeypatch) -> None:
        seen = {}
        monkeypatch.setattr(logger_module.logging, "basicConfig", lambda **kwargs: seen.update(kwargs))
        monkeypatch.setattr(settings, "LOG_LEVEL", "debug")

        logger_module.setup_logging()

        assert seen["level"] == "DEBUG"
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_explicit_level_wins(self, monkeypatch) -> None:
        seen = {}
        monkeypatch.setattr(logger_module.logging, "basicConfig", lambda **kwargs: seen.update(kwargs))

        logger_module.setup_logging("warning")

        assert seen["level"] == "WARNING"
