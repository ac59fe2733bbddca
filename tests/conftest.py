"""Fixtures pytest partagées."""

from __future__ import annotations

import pytest
import requests

from cyclechat.config import ClientConfig
from cyclechat.navigation import Navigator
from cyclechat.services import ApiClient, AuthGateway, MessageGateway, SessionManager
from cyclechat.storage import MemoryTokenStore
from tests.fakes import FakeTransport, ManualDispatcher, ManualScheduler

API_URL = "http://testserver/api"

USER_PAYLOAD = {
    "id": 1,
    "username": "testuser",
    "role": "USER",
    "createdAt": "2024-01-01T00:00:00",
}

LOGIN_PAYLOAD = {
    "accessToken": "jwt-token-123",
    "tokenType": "Bearer",
    "expiresIn": 86400000,
    "username": "testuser",
    "role": "USER",
}


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def dispatcher() -> ManualDispatcher:
    return ManualDispatcher()


@pytest.fixture
def client(
    transport: FakeTransport,
    store: MemoryTokenStore,
    navigator: Navigator,
    dispatcher: ManualDispatcher,
) -> ApiClient:
    """Client HTTP complet dont le transport est remplacé par ``transport``."""
    http = requests.Session()
    http.mount("http://", transport)
    config = ClientConfig(api_url=API_URL, timeout=2.0)
    return ApiClient.from_config(config, store, navigator, dispatcher=dispatcher, session=http)


@pytest.fixture
def auth_gateway(client: ApiClient) -> AuthGateway:
    return AuthGateway(client)


@pytest.fixture
def message_gateway(client: ApiClient) -> MessageGateway:
    return MessageGateway(client)


@pytest.fixture
def session_manager(
    auth_gateway: AuthGateway,
    store: MemoryTokenStore,
    navigator: Navigator,
    client: ApiClient,
    dispatcher: ManualDispatcher,
) -> SessionManager:
    return SessionManager(
        auth_gateway,
        store,
        navigator,
        dispatcher=dispatcher,
        unauthorized=client.unauthorized,
    )
