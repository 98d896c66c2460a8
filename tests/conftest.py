"""
Shared pytest fixtures for Connect client tests.

Provides client settings, a scripted transport for dispatcher-level tests and
the in-process fake XML API server for end-to-end flows.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from connect_client.api_clients.sco_client import ScoAPIClient
from connect_client.config import ClientSettings

from .infrastructure.fake_connect_server import SERVICE_URL, FakeConnectServer
from .infrastructure.recording_transport import RecordingTransport


@pytest.fixture
def settings() -> ClientSettings:
    """Settings pointing at the fake server, session passed as a parameter."""
    return ClientSettings(service_url=SERVICE_URL, username="a", password="b")


@pytest.fixture
def recording_transport() -> RecordingTransport:
    """Transport double that records calls and answers OK by default."""
    return RecordingTransport()


@pytest.fixture
def fake_server() -> FakeConnectServer:
    """Fresh fake XML API server."""
    return FakeConnectServer()


@pytest_asyncio.fixture
async def server_client(
    settings: ClientSettings, fake_server: FakeConnectServer
) -> AsyncGenerator[ScoAPIClient, None]:
    """ScoAPIClient talking HTTP to the fake server."""
    client = ScoAPIClient(settings, transport=fake_server.client_transport(settings))
    try:
        yield client
    finally:
        await client.close()
