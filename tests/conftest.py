"""
Root-level conftest for all tests.

Settings are built explicitly so tests never depend on a .env file or on
environment variables.
"""

import pytest

from autopilot.main.config import Settings, reset_settings, set_settings
from autopilot.main.request_context import clear_request_context


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings(
        # Database settings (not used in unit tests)
        postgres_user="unit_test_user",
        postgres_host="localhost",
        postgres_password="unit_test_password",
        postgres_port=5432,
        postgres_db="unit_test_db",

        # Short timeouts keep the timeout tests fast
        automation_action_timeout_seconds=1.0,
        automation_engine_grace_seconds=1.0,

        testing=True,
        dev=True,
    )


@pytest.fixture(autouse=True)
def override_settings(test_settings: Settings):
    """Install test settings for each test and reset afterwards."""
    set_settings(test_settings)
    yield
    reset_settings()
    clear_request_context()
