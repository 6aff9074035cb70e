"""
Unit tests for FastAPI application lifespan management.

Startup must create tables through ``init_db`` and must not abort the
server when the database is unreachable.
"""

from unittest.mock import AsyncMock, patch

from fastapi import FastAPI

from transparent_trust.server.main import lifespan


class TestLifespan:
    async def test_startup_initializes_database(self):
        app = FastAPI()
        with patch("transparent_trust.server.main.init_db", new_callable=AsyncMock) as mock_init_db:
            async with lifespan(app):
                mock_init_db.assert_awaited_once()

    async def test_database_failure_does_not_abort_startup(self):
        app = FastAPI()
        entered = False
        with (
            patch("transparent_trust.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("transparent_trust.server.main.logger") as mock_logger,
        ):
            mock_init_db.side_effect = ConnectionError("database is down")
            async with lifespan(app):
                entered = True

        assert entered
        mock_logger.error.assert_called_once()
        assert "database is down" in mock_logger.error.call_args[0][0]

    async def test_shutdown_is_logged(self):
        app = FastAPI()
        with (
            patch("transparent_trust.server.main.init_db", new_callable=AsyncMock),
            patch("transparent_trust.server.main.logger") as mock_logger,
        ):
            async with lifespan(app):
                pass

        messages = [c.args[0] for c in mock_logger.info.call_args_list]
        assert any("Shutting down" in m for m in messages)
