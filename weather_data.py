"""Weather Data Model and Response Normalization Module.

This module turns a decoded OpenWeatherMap "current weather" payload into
a display-ready Weather value. The payload is treated as untrusted: any
field may be missing or carry the wrong type, and normalization falls back
to fixed placeholders instead of raising.

Main components:
    - Weather: Immutable value returned for a successful lookup.
    - sanitize_text: Trim and capitalize a free-text field for display.
    - normalize_weather_response: Map a raw payload to a Weather.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

UNKNOWN_CITY = "Unknown city"
UNKNOWN_WEATHER = "Unknown weather"


@dataclass(frozen=True)
class Weather:
    """Current weather conditions for a single city.

        Attributes:
            city: Sanitized city name as reported by the provider.
            temperature_c: Current temperature in degrees Celsius.
            description: Sanitized, human-readable weather description.
    """
    city: str
    temperature_c: float
    description: str

    def to_json(self) -> str:
        """Serializes the weather into a JSON string ready for display.

            Returns:
                str: A JSON string with the city, the temperature rounded to
                    two decimals and the description.
        """
        return json.dumps({
            "city": self.city,
            "temp_c": f"{self.temperature_c:.2f}",
            "description": self.description,
        })


def sanitize_text(text: Optional[str]) -> str:
    """Normalizes a free-text field for display.

        Surrounding whitespace is removed, then the first character is
        upper-cased and the rest lower-cased. Casing is locale-naive.

        Args:
            text: Raw text, possibly None.

        Returns:
            The cleaned text, or an empty string for None/empty input.

        Example:
            >>> sanitize_text("  lOnDoN ")
            'London'
    """
    if not text:
        return ""
    clean_text = text.strip()
    return clean_text[:1].upper() + clean_text[1:].lower()


def _extract_description(payload: dict) -> str:
    weather_list = payload.get("weather")
    if isinstance(weather_list, list) and len(weather_list) > 0:
        weather_info = weather_list[0]
        if isinstance(weather_info, dict) and isinstance(weather_info.get("description"), str):
            return sanitize_text(weather_info["description"])
    return UNKNOWN_WEATHER


def _extract_temperature_c(payload: dict) -> float:
    main_dict = payload.get("main")
    if isinstance(main_dict, dict):
        temp = main_dict.get("temp")
        # bool is an int subclass but never a temperature
        if isinstance(temp, (int, float)) and not isinstance(temp, bool):
            return float(temp)
    return 0.0


def normalize_weather_response(payload: dict[str, Any]) -> Weather:
    """Transforms a decoded OpenWeatherMap response into a Weather value.

        Missing, blank or wrongly typed fields never raise; they are replaced
        by UNKNOWN_CITY, UNKNOWN_WEATHER or a temperature of 0.0.

        Args:
            payload: The decoded JSON object of an HTTP 200 response.

        Returns:
            A Weather instance with sanitized text fields.
    """
    city_name = payload.get("name")
    city = sanitize_text(city_name) if isinstance(city_name, str) else ""

    return Weather(city or UNKNOWN_CITY, _extract_temperature_c(payload), _extract_description(payload))
