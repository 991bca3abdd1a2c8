"""Unit tests for weather response normalization.

This module validates that raw OpenWeatherMap payloads are mapped to
display-ready Weather values, including text sanitization and the
fallbacks used when fields are missing or carry unexpected types.
"""

import json

import pytest
from weather_data import (
    sanitize_text,
    normalize_weather_response,
    Weather,
    UNKNOWN_CITY,
    UNKNOWN_WEATHER
)


@pytest.mark.parametrize("text, expected_output", [
    ("  lOnDoN ", "London"),
    ("", ""),
    (None, ""),
    ("   ", ""),
    ("broken CLOUDS", "Broken clouds"),
    ("x", "X"),
])
def test_sanitize_text(text, expected_output):
    """Verifies trimming and first-letter capitalization of free text."""
    assert sanitize_text(text) == expected_output


def test_normalize_full_payload():
    """A complete payload yields sanitized text fields and the exact temperature."""
    payload = {
        "name": "querétaro",
        "main": {"temp": 23.4, "humidity": 40},
        "weather": [{"id": 800, "description": "CLEAR sky"}],
    }

    result = normalize_weather_response(payload)

    assert result == Weather("Querétaro", 23.4, "Clear sky")


def test_normalize_missing_weather_uses_fallback():
    """A payload without 'weather' falls back to the unknown-weather description."""
    result = normalize_weather_response({"name": "Paris", "main": {"temp": 11}})

    assert result.description == UNKNOWN_WEATHER
    assert result.temperature_c == 11.0
    assert isinstance(result.temperature_c, float)


@pytest.mark.parametrize("payload", [
    {},
    {"name": 42, "main": "hot", "weather": "rain"},
    {"name": "   ", "main": {"temp": "12"}, "weather": []},
    {"name": None, "main": {"temp": True}, "weather": [None]},
    {"main": None, "weather": [{"description": 5}]},
])
def test_normalize_malformed_fields_never_raise(payload):
    """Wrongly typed or absent fields are replaced by fixed placeholders."""
    result = normalize_weather_response(payload)

    assert result.city == UNKNOWN_CITY
    assert result.temperature_c == 0.0
    assert result.description == UNKNOWN_WEATHER


def test_weather_is_immutable():
    """Weather values cannot be modified after construction."""
    weather = Weather("London", 12.0, "Light rain")

    with pytest.raises(AttributeError):
        weather.city = "Paris"


def test_weather_to_json():
    """The JSON form rounds the temperature to two decimals."""
    result = json.loads(Weather("London", 12.346, "Light rain").to_json())

    assert result == {"city": "London", "temp_c": "12.35", "description": "Light rain"}
