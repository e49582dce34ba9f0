"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from canvaslayout.dsl.schema import Dimensions, Frame, SolverOptions


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI app."""
    from canvaslayout.api.main import create_app

    with TestClient(create_app()) as client:
        yield client


@pytest.fixture
def base_options() -> SolverOptions:
    """Square 1080 canvas with three slots."""
    return SolverOptions(
        canvas_width=1080,
        canvas_height=1080,
        slot_names=["headline", "subhead", "cta"],
        default_dimensions=Dimensions(width=100, height=50),
    )


@pytest.fixture
def sample_frames() -> dict[str, Frame]:
    """Current frames for the three base slots."""
    return {
        "headline": Frame(x=100, y=100, width=200, height=60),
        "subhead": Frame(x=100, y=180, width=180, height=40),
        "cta": Frame(x=0, y=0, width=120, height=44),
    }


@pytest.fixture
def sample_constraint_set() -> dict:
    """Template constraint set in document form."""
    return {
        "global": [
            {"eq": "headline.top = canvas.top + 60"},
            {"eq": "headline.centerX = canvas.centerX"},
            {"ineq": "subhead.top >= headline.bottom + 20"},
            {"eq": "cta.bottom = canvas.bottom - 32"},
            {"avoidOverlap": ["headline", "cta"]},
            {"eq": "headline.fontSize = canvas.height * 0.05"},
        ],
        "byRatio": {
            "9:16": [
                {"eq": "headline.width = canvas.width * 0.8"},
                {"eq": "not a constraint"},
            ],
            "16:9": [
                {"eq": "headline.width = canvas.width * 0.5"},
            ],
        },
    }
