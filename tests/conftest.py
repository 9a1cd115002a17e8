"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src is on the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rhmm.config import (  # noqa: E402
    DEFAULT_WEATHER_EMISSION,
    DEFAULT_WEATHER_START,
    DEFAULT_WEATHER_TRANS,
    WEATHER_OBSERVATIONS,
    WEATHER_STATES,
)


@pytest.fixture
def weather_functions():
    """Plain-callable model functions for the Rainy/Sunny example."""
    return (
        lambda s: DEFAULT_WEATHER_START[s],
        lambda src, dst: DEFAULT_WEATHER_TRANS[src][dst],
        lambda s, o: DEFAULT_WEATHER_EMISSION[s][o],
    )


@pytest.fixture
def weather_states():
    return WEATHER_STATES


@pytest.fixture
def weather_observations():
    return WEATHER_OBSERVATIONS
