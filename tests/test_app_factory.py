"""Tests for the Flask application factory."""
from __future__ import annotations


def test_health_endpoint_returns_ok(client, tmp_path):
    """The health endpoint should respond with an OK payload and create uploads dir."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}
    # uploads dir is configured via TestConfig in conftest and created on app init
    assert (tmp_path / "uploads").is_dir()


def test_blueprints_registered(app):
    """Application factory should register expected blueprints."""
    assert {"auth", "items", "users", "admin"}.issubset(set(app.blueprints))


def test_unknown_route_returns_json_404(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["error"] == "Not Found"
    assert payload["message"]
    assert response.headers.get("X-Request-ID")


def test_cli_commands_registered(app):
    assert "seed-admin" in app.cli.commands
    assert "check-admin" in app.cli.commands
