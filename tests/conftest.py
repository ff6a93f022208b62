"""Shared fixtures for the gamedex test suite."""

import pytest

from gamedex.services.http_client import HttpClientService
from gamedex.services.igdb_client import IGDBClient
from gamedex.services.state import UpstreamState
from tests.fakes import FakeClock, FakeIGDB


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> FakeIGDB:
    return FakeIGDB()


@pytest.fixture
def state(clock: FakeClock) -> UpstreamState:
    return UpstreamState(clock=clock)


@pytest.fixture
def client(upstream: FakeIGDB, state: UpstreamState) -> IGDBClient:
    http_client = HttpClientService(transport=upstream.transport())
    return IGDBClient(http_client, "client-id", "client-secret", state=state)
