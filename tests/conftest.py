"""
Global pytest fixtures and configuration for the test suite.

This module provides reusable fixtures for:
- HTTP clients
- Sample messages, registries and events
"""

import os
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from redflag_engine.api.app import app
from redflag_engine.models.message import Message
from redflag_engine.red_flags.vip_detector import VipRegistry

from .fixtures.messages import make_message, make_thread_messages, make_vip


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def neutral_message() -> Message:
    """A message that matches no red-flag pattern."""
    return make_message()


@pytest.fixture
def urgent_vip_thread() -> List[Message]:
    """
    Three messages from a VIP within 20 minutes, the last one urgent.

    Triggers keyword, VIP and velocity (windowed + rapid exchange) signals.
    """
    messages = make_thread_messages(
        "thread-urgent", 3, gap_minutes=10, subject="Contract renewal", body="Can we sign today?",
        sender="boss@acme.com",
    )
    last = messages[-1]
    messages[-1] = make_message(
        id=last.id,
        subject="Urgent: contract renewal",
        body="Can we sign today?",
        sender="boss@acme.com",
        thread_id=last.thread_id,
        received_at=last.received_at,
    )
    return messages


@pytest.fixture
def vip_registry() -> VipRegistry:
    """Registry with one explicit VIP (boss@acme.com)."""
    return VipRegistry(vips=[make_vip()])


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables after each test.

    This prevents test pollution from env var changes.
    """
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """
    Configure pytest with custom markers.
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (API, CLI, end-to-end)"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests that may take longer to run"
    )
