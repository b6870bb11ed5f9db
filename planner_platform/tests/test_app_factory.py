"""Smoke tests for the Flask application factory."""

from __future__ import annotations

import pytest

from config import DevConfig, TestConfig, resolve_config
from planner_app import create_app
from planner_app.services.ai_client import PlanGeneratorClient


@pytest.fixture(scope="module")
def app():
    app = create_app("test")
    yield app


def test_app_creation(app):
    assert app.config["TESTING"] is True
    assert app.config["DRAFT_SWEEP_ENABLE"] is False
    assert "draft_sweeper_stop" not in app.extensions
    assert isinstance(app.extensions["plan_generator"], PlanGeneratorClient)


def test_config_aliases():
    assert resolve_config("testing") is TestConfig
    assert resolve_config(None) is DevConfig


def test_cli_groups_registered(app):
    assert {"drafts", "quota"} <= set(app.cli.commands)


@pytest.mark.parametrize(
    "endpoint,module",
    [
        ("/api/plan/ping", "plan"),
        ("/api/quota/ping", "quota"),
    ],
)
def test_ping_endpoints(app, endpoint, module):
    client = app.test_client()
    response = client.get(endpoint)
    assert response.status_code == 200
    assert response.get_json() == {"module": module, "status": "ok"}


def test_generator_timeouts_come_from_config(app):
    client = app.extensions["plan_generator"]

    assert not hasattr(TestConfig, "AI_TIMEOUT_SECONDS")
    assert client.connect_timeout == app.config["AI_CONNECT_TIMEOUT_SEC"]
    assert client.read_timeout == app.config["AI_READ_TIMEOUT_SEC"]
