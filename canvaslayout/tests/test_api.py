"""Tests for the layout API endpoints."""

import json

import pytest
from fastapi.testclient import TestClient

from canvaslayout.api.config import Settings, get_settings
from canvaslayout.constraints.linear import LinearSystem

OPTIONS = {
    "canvasWidth": 1080,
    "canvasHeight": 1080,
    "slotNames": ["headline", "subhead", "cta"],
}

HEADLINE_HALF_WIDTH = {
    "type": "equality",
    "left": {"slot": "headline", "property": "width"},
    "operator": "=",
    "right": {"slot": "canvas", "property": "width", "multiplier": 0.5},
}


@pytest.fixture
def custom_client(monkeypatch: pytest.MonkeyPatch):
    """Client whose settings come from a patched environment."""
    from canvaslayout.api.main import create_app

    monkeypatch.setenv("DEFAULT_SLOT_WIDTH", "240")
    monkeypatch.setenv("DEFAULT_SLOT_HEIGHT", "80")
    custom = Settings()

    app = create_app()
    app.dependency_overrides[get_settings] = lambda: custom

    with TestClient(app) as client:
        yield client


def test_health_check(client: TestClient) -> None:
    """Test root health check endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_prefixed_health_check(client: TestClient) -> None:
    """Test the versioned health check includes a timestamp."""
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


def test_parse_endpoint(client: TestClient, sample_constraint_set: dict) -> None:
    """Test parsing returns both buckets in document form."""
    response = client.post("/api/v1/layout/parse", json=sample_constraint_set)
    assert response.status_code == 200
    data = response.json()
    assert len(data["global"]) == 4
    assert len(data["byRatio"]["9:16"]) == 1
    first = data["global"][0]
    assert first["type"] == "equality"
    assert first["left"] == {"slot": "headline", "property": "top"}
    assert first["right"]["offset"] == 60


def test_solve_endpoint(client: TestClient) -> None:
    """Test a clean solve has frames and no error key."""
    response = client.post(
        "/api/v1/layout/solve",
        json={
            "frames": {"headline": {"x": 10, "y": 20, "width": 200, "height": 60}},
            "constraints": [HEADLINE_HALF_WIDTH],
            "options": OPTIONS,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert "error" not in data
    assert data["frames"]["headline"] == {"x": 10, "y": 20, "width": 540, "height": 60}
    assert set(data["frames"]) == {"headline", "subhead", "cta"}


def test_solve_reports_failed_constraints(client: TestClient) -> None:
    """Test unknown slots come back as failedConstraints with status 200."""
    ghost = {**HEADLINE_HALF_WIDTH, "left": {"slot": "ghost", "property": "width"}}

    response = client.post(
        "/api/v1/layout/solve",
        json={"constraints": [ghost, HEADLINE_HALF_WIDTH], "options": OPTIONS},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["error"]["message"] == "1 constraint(s) could not be applied"
    assert data["error"]["failedConstraints"][0]["left"]["slot"] == "ghost"
    assert data["frames"]["headline"]["width"] == 540


def test_solve_failure_returns_input_frames(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test an internal solver failure still answers with the input frames."""

    def explode(self: LinearSystem) -> None:
        raise RuntimeError("simplex blew up")

    monkeypatch.setattr(LinearSystem, "solve", explode)
    frames = {"cta": {"x": 1, "y": 2, "width": 30, "height": 40}}

    response = client.post(
        "/api/v1/layout/solve",
        json={"frames": frames, "constraints": [], "options": OPTIONS},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["frames"] == frames
    assert data["error"]["message"] == "simplex blew up"
    assert data["error"]["details"] == {"exception": "RuntimeError"}


def test_solve_requires_options(client: TestClient) -> None:
    """Test requests without options are rejected."""
    response = client.post("/api/v1/layout/solve", json={"constraints": []})
    assert response.status_code == 422


def test_solve_rejects_negative_canvas(client: TestClient) -> None:
    """Test option validation happens at the boundary."""
    response = client.post(
        "/api/v1/layout/solve",
        json={"options": {**OPTIONS, "canvasWidth": -10}},
    )
    assert response.status_code == 422


def test_solve_uses_configured_defaults(custom_client: TestClient) -> None:
    """Test omitted default dimensions come from settings."""
    response = custom_client.post(
        "/api/v1/layout/solve",
        json={"options": {**OPTIONS, "slotNames": ["badge"]}},
    )
    assert response.status_code == 200
    badge = response.json()["frames"]["badge"]
    assert badge["width"] == 240
    assert badge["height"] == 80


def test_request_options_override_defaults(custom_client: TestClient) -> None:
    """Test values sent by the client win over settings."""
    response = custom_client.post(
        "/api/v1/layout/solve",
        json={
            "options": {
                **OPTIONS,
                "slotNames": ["badge"],
                "defaultDimensions": {"width": 64, "height": 32},
            }
        },
    )
    assert response.status_code == 200
    badge = response.json()["frames"]["badge"]
    assert badge["width"] == 64
    assert badge["height"] == 32


def test_apply_endpoint(client: TestClient, sample_constraint_set: dict) -> None:
    """Test apply parses, selects the ratio bucket and solves."""
    response = client.post(
        "/api/v1/layout/apply",
        json={"constraints": sample_constraint_set, "ratio": "9:16", "options": OPTIONS},
    )
    assert response.status_code == 200
    data = response.json()
    assert "error" not in data
    headline = data["frames"]["headline"]
    assert headline["width"] == pytest.approx(864, abs=0.1)
    assert headline["y"] == pytest.approx(60, abs=0.1)
    cta = data["frames"]["cta"]
    assert cta["y"] + cta["height"] == pytest.approx(1048, abs=0.1)


def test_apply_without_seeding(client: TestClient) -> None:
    """Test seedMissing=false falls back to default dimensions."""
    response = client.post(
        "/api/v1/layout/apply",
        json={
            "options": {**OPTIONS, "slotNames": ["badge"], "defaultDimensions": {"width": 70, "height": 30}},
            "seedMissing": False,
        },
    )
    assert response.status_code == 200
    badge = response.json()["frames"]["badge"]
    assert badge["width"] == 70
    assert badge["height"] == 30


def test_request_id_echoed(client: TestClient) -> None:
    """Test the request ID header is propagated back."""
    response = client.post(
        "/api/v1/layout/parse",
        json={},
        headers={"X-Request-ID": "req-1234"},
    )
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-1234"


def test_request_id_generated(client: TestClient) -> None:
    """Test a request ID is generated when none is sent."""
    response = client.get("/health")
    assert response.headers.get("X-Request-ID")


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test settings read solver defaults from the environment."""
    monkeypatch.setenv("MIN_SLOT_WIDTH", "25")
    monkeypatch.setenv("API_PREFIX", "/v2")

    settings = Settings()

    assert settings.api_prefix == "/v2"
    assert settings.solver_defaults["min_slot_width"] == 25
    assert settings.solver_defaults["default_dimensions"] == {"width": 100, "height": 100}


@pytest.mark.parametrize("field", ["multiplier", "offset"])
@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
def test_solve_rejects_non_finite_operands(client: TestClient, field: str, literal: str) -> None:
    """Test JSON Infinity/NaN literals are refused with a clean 422."""
    constraint = {**HEADLINE_HALF_WIDTH, "right": {"slot": "canvas", "property": "width", field: "__VALUE__"}}
    body = json.dumps({"constraints": [constraint], "options": OPTIONS}).replace('"__VALUE__"', literal)

    response = client.post(
        "/api/v1/layout/solve",
        content=body,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert any(field in error["loc"] for error in detail)
    assert all("input" not in error for error in detail)
