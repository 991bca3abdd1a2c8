"""Environment-based configuration for the weather client.

The API key is read from OPEN_WEATHER_API_KEY. For local runs the
variables may live in a .env file next to the code; variables already set
in the process environment (e.g. by the Lambda runtime) take precedence.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from open_weather_map import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_SECONDS, FetchConfig

API_KEY_ENV_VAR = "OPEN_WEATHER_API_KEY"
MAX_RETRIES_ENV_VAR = "WEATHER_MAX_RETRIES"
TIMEOUT_SECONDS_ENV_VAR = "WEATHER_TIMEOUT_SECONDS"

DEFAULT_ENV_FILE = Path(__file__).resolve().with_name(".env")


def load_env_file(path: os.PathLike | str = DEFAULT_ENV_FILE) -> bool:
    """Loads variables from a .env file without overriding the environment.

        Args:
            path: Location of the .env file.

        Returns:
            True if the file existed and was loaded.
    """
    if not Path(path).is_file():
        return False
    return load_dotenv(path, override=False)


def get_api_key() -> Optional[str]:
    """Returns the configured OpenWeatherMap API key, or None if unset."""
    return os.getenv(API_KEY_ENV_VAR)


def _get_number(name: str, default, cast):
    raw_value = os.getenv(name)
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        return cast(raw_value)
    except ValueError as err:
        raise ValueError(f"{name} must be a number (got {raw_value!r})") from err


def load_fetch_config(max_retries: Optional[int] = None) -> FetchConfig:
    """Builds a FetchConfig from the environment.

        A missing API key yields an empty key, so fetch_weather reports
        MissingCredentialError instead of failing here.

        Args:
            max_retries: Overrides WEATHER_MAX_RETRIES when given.

        Returns:
            A FetchConfig with the configured key, attempt budget and timeout.

        Raises:
            ValueError: If a numeric override is not a number or the attempt
                budget is below 1.
    """
    if max_retries is None:
        max_retries = _get_number(MAX_RETRIES_ENV_VAR, DEFAULT_MAX_RETRIES, int)

    return FetchConfig(
        api_key=get_api_key() or "",
        max_retries=max_retries,
        timeout_seconds=_get_number(TIMEOUT_SECONDS_ENV_VAR, DEFAULT_TIMEOUT_SECONDS, float),
    )
