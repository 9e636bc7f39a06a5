"""
Global pytest fixtures for the IdleWatch test suite.

Provides:
- Test environment defaults (set before any app import)
- Fake aioboto3 clients and client factory
- Async paginator stand-ins
- FastAPI test client wired to a mocked ResourceService
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment BEFORE any app imports
os.environ["TESTING"] = "true"
os.environ["SCHEDULER_ENABLED"] = "false"
for _mail_var in ("SMTP_USER", "SMTP_PASSWORD", "NOTIFY_RECIPIENT"):
    os.environ.pop(_mail_var, None)


# ============================================================================
# AWS client fakes
# ============================================================================

class AsyncPageIterator:
    """Stands in for an aioboto3 paginator's async page stream."""

    def __init__(self, pages: List[Dict[str, Any]], error: Exception | None = None):
        self.pages = list(pages)
        self.error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.pages:
            return self.pages.pop(0)
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        raise StopAsyncIteration


class FakeClientFactory:
    """Drop-in for AWSClientFactory that hands out pre-built mock clients."""

    def __init__(self, **clients: Any):
        self.clients = clients
        self.calls: List[tuple[str, str]] = []

    def client(self, service_name: str, region: str) -> Any:
        self.calls.append((service_name, region))
        return self.clients[service_name]


def build_mock_client(**methods: Any) -> MagicMock:
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    for name, value in methods.items():
        setattr(client, name, value)
    return client


def build_paginating_client(pages_by_operation: Dict[str, List[Dict[str, Any]]], **methods: Any) -> MagicMock:
    client = build_mock_client(**methods)

    def get_paginator(operation: str) -> MagicMock:
        paginator = MagicMock()
        paginator.paginate = MagicMock(
            return_value=AsyncPageIterator(pages_by_operation.get(operation, []))
        )
        return paginator

    client.get_paginator = MagicMock(side_effect=get_paginator)
    return client


@pytest.fixture
def mock_client():
    return build_mock_client


@pytest.fixture
def paginating_client():
    return build_paginating_client


@pytest.fixture
def client_factory():
    return FakeClientFactory


@pytest.fixture
def page_iterator():
    return AsyncPageIterator


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def days_ago(now):
    def _days_ago(days: float) -> datetime:
        return now - timedelta(days=days)

    return _days_ago


# ============================================================================
# FastAPI Test Client Fixtures
# ============================================================================

@pytest.fixture
def resource_service() -> MagicMock:
    service = MagicMock()
    service.list_regions = AsyncMock(return_value=[])
    service.fetch_resources = AsyncMock()
    service.scan = AsyncMock()
    service.resend_last_report = AsyncMock()
    return service


@pytest.fixture
def app(resource_service):
    """The real IdleWatch app, without lifespan, backed by a mocked service."""
    from app.main import app as idlewatch_app

    idlewatch_app.state.resource_service = resource_service
    yield idlewatch_app
    del idlewatch_app.state.resource_service


@pytest.fixture
def client(app) -> Generator:
    """Sync test client; server exceptions are rendered, not re-raised."""
    from fastapi.testclient import TestClient

    yield TestClient(app, raise_server_exceptions=False)
