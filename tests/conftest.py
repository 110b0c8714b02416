"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from kitectl.core.auth import AUTHENTICATED_PATH, AuthClient
from kitectl.core.lifecycle.orchestrator import LifecycleOrchestrator
from kitectl.core.reachability import SYSTEM_PATH, ReachabilityClient
from kitectl.core.whitelist import INCLUSIONS_PATH, WhitelistClient
from kitectl.domain.config import PollConfig
from kitectl.ports.http import HttpResponse
from kitectl.ports.probe import PlatformProbe
from tests.fixtures import FakeHttpClient, FakeProbe

# ============================================================================
# Config Isolation
# ============================================================================
# Keep the user's real ~/.config/kitectl/config.toml out of every test.


@pytest.fixture(autouse=True)
def no_global_config(tmp_path: Path):
    """Point the global config path at a file that does not exist."""
    nonexistent_global = tmp_path / "nonexistent_global" / "config.toml"
    with patch(
        "kitectl.adapters.config.toml_config_provider.get_global_config_path",
        return_value=nonexistent_global,
    ):
        yield nonexistent_global


# ============================================================================
# Daemon API Routes
# ============================================================================
# Route tables for FakeHttpClient, layered the way the ladder is: each level
# includes the routes of the levels below it.


def reachable_routes() -> dict[str, HttpResponse | Exception]:
    """Routes for a daemon whose API answers but has no session."""
    return {SYSTEM_PATH: HttpResponse(200, "{}")}


def not_authenticated_routes() -> dict[str, HttpResponse | Exception]:
    """Routes for a reachable daemon with an unauthenticated session."""
    routes = reachable_routes()
    routes[AUTHENTICATED_PATH] = HttpResponse(401, "")
    return routes


def authenticated_routes(
    whitelist: list[str] | None = None,
) -> dict[str, HttpResponse | Exception]:
    """Routes for an authenticated daemon, optionally with whitelisted paths."""
    routes = reachable_routes()
    routes[AUTHENTICATED_PATH] = HttpResponse(200, "authenticated")
    if whitelist is not None:
        routes[INCLUSIONS_PATH] = HttpResponse(200, json.dumps(whitelist))
    return routes


# ============================================================================
# Orchestrator Builders
# ============================================================================


def build_orchestrator(
    probe: PlatformProbe,
    http: FakeHttpClient,
    sleep: Callable[[float], None] | None = None,
    poll: PollConfig | None = None,
) -> LifecycleOrchestrator:
    """Wire an orchestrator from fakes with zero-length polling sleeps."""
    return LifecycleOrchestrator(
        probe=probe,
        reachability=ReachabilityClient(http, timeout=0.5),
        auth=AuthClient(http, timeout=0.5),
        whitelist=WhitelistClient(http, timeout=0.5),
        poll=poll or PollConfig(attempts=3, interval=0.0),
        sleep=sleep or (lambda _seconds: None),
    )


@pytest.fixture
def running_probe() -> FakeProbe:
    """Probe reporting Kite installed and running."""
    return FakeProbe(installed=True, running=True)


@pytest.fixture
def fake_http() -> FakeHttpClient:
    """HTTP client with no routes (nothing listening)."""
    return FakeHttpClient()
