"""Pytest configuration and fixtures for integration tests.

Integration tests call the real Gemini models. They are skipped unless a real
GEMINI_API_KEY is configured in the environment or .env.
"""

import os
import pytest
from dotenv import load_dotenv
from pathlib import Path


FAKE_KEYS = ("", "test_gemini_key")


def pytest_configure(config):
    """Load .env from the project root before collection."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: These tests require a valid GEMINI_API_KEY")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip the integration session when no real API key is configured."""
    if os.getenv("GEMINI_API_KEY", "") in FAKE_KEYS:
        pytest.skip(
            "Integration tests skipped. Missing GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "pirinku_state.json"
