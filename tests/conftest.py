"""
Pytest configuration for chat-pulse tests.
"""

import sys
from pathlib import Path

import pytest

# Make the src/ layout importable without an install
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store():
    from chat_pulse.state import UserStateStore
    return UserStateStore()


@pytest.fixture
def client(store):
    """Flask test client bound to a fresh store."""
    from chat_pulse.service import create_service
    app = create_service(store, channel="somechannel")
    app.config["TESTING"] = True
    return app.test_client()
