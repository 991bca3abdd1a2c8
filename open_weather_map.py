"""OpenWeatherMap Service Provider Module.

This module implements the integration with the OpenWeatherMap "current
weather" endpoint. It provides the per-call FetchConfig, a specialized
exception hierarchy describing every way a lookup can fail, and the
fetch_weather function which owns the retry loop.

Retry policy:
    - HTTP 429 and 5xx are retried with a quadratic delay (1s, 4s, 9s, ...).
    - Timeouts are retried with a linear delay (1s, 2s, 3s, ...).
    - HTTP 401, 404, any other status, connection failures and malformed
      bodies end the lookup immediately.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import quote, quote_plus

import requests

from weather_data import Weather, normalize_weather_response
from weather_service import WeatherServiceError

logger = logging.getLogger(__name__)

OPEN_WEATHER_MAP_ENDPOINT = "https://api.openweathermap.org/data/2.5/weather"

DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_SECONDS = 8


class OpenWeatherMapError(WeatherServiceError):
    """Base exception for errors originating from an OpenWeatherMap lookup."""
    pass


class MissingCredentialError(OpenWeatherMapError):
    """Raised before any request when no API key is configured."""
    def __init__(self):
        super().__init__("The OpenWeatherMap API key is not configured.")


class InvalidInputError(OpenWeatherMapError):
    """Raised before any request when the city name is empty after trimming.

        Attributes:
            city: The rejected city input.
    """
    def __init__(self, city: Optional[str]):
        super().__init__("The city name must not be empty.")
        self.city = city


class CityNotFoundError(OpenWeatherMapError):
    """Raised when OpenWeatherMap answers 404 for the requested city.

        Attributes:
            city: The city that could not be found.
            status_code: Always 404.
    """
    def __init__(self, city: str):
        super().__init__(f"No matching city was found with the name '{city}'.")
        self.city = city
        self.status_code = 404


class InvalidCredentialError(OpenWeatherMapError):
    """Raised when OpenWeatherMap rejects the API key with a 401."""
    def __init__(self):
        super().__init__("The OpenWeatherMap API key was rejected (status 401).")
        self.status_code = 401


class RetriesExhaustedError(OpenWeatherMapError):
    """Raised when the final attempt still got a rate-limit or server error.

        Attributes:
            status_code: Status code of the last response.
            attempts: Number of attempts made.
    """
    def __init__(self, status_code: int, attempts: int):
        super().__init__(f"Rate limit or server error (status {status_code}) "
                         f"persisted after {attempts} attempts.")
        self.status_code = status_code
        self.attempts = attempts


class TimeoutExhaustedError(OpenWeatherMapError):
    """Raised when every attempt timed out.

        Attributes:
            attempts: Number of attempts made.
    """
    def __init__(self, attempts: int):
        super().__init__(f"The request timed out after {attempts} attempts.")
        self.attempts = attempts


class UnexpectedStatusError(OpenWeatherMapError):
    """Raised for a status code that is neither success nor retryable.

        Attributes:
            status_code: The unexpected status code.
    """
    def __init__(self, status_code: int):
        super().__init__(f"Unexpected response status {status_code}.")
        self.status_code = status_code


class ConnectionOrDataError(OpenWeatherMapError):
    """Raised when the transport fails or the response body cannot be used.

        Attributes:
            detail: Message of the underlying error.
    """
    def __init__(self, detail: str):
        super().__init__(f"Connection or data error: {detail}")
        self.detail = detail


class RetryLogicExhaustedError(OpenWeatherMapError):
    """Raised if the retry loop ends without a result or a more specific error.

        Attributes:
            attempts: Number of attempts the loop was allowed.
    """
    def __init__(self, attempts: int):
        super().__init__(f"The weather request failed after {attempts} attempts.")
        self.attempts = attempts


def quadratic_delay(attempt: int) -> float:
    """Delay before retrying a rate-limited or failed-server attempt."""
    return float(attempt * attempt)


def linear_delay(attempt: int) -> float:
    """Delay before retrying a timed-out attempt."""
    return float(attempt)


@dataclass(frozen=True)
class FetchConfig:
    """Per-call settings for fetch_weather.

        Attributes:
            api_key: OpenWeatherMap API key.
            max_retries: Total number of attempts, at least 1.
            timeout_seconds: Timeout applied to each attempt.
            status_delay: Seconds to wait after a 429/5xx on a given attempt.
            timeout_delay: Seconds to wait after a timeout on a given attempt.
    """
    api_key: str
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    status_delay: Callable[[int], float] = quadratic_delay
    timeout_delay: Callable[[int], float] = linear_delay

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1 (got {self.max_retries})")

    def __repr__(self):
        """Returns a string representation with the API key masked."""
        return (
            f"{self.__class__.__name__}("
            f"api_key={'***' if self.api_key else ''!r}, "
            f"max_retries={self.max_retries!r}, "
            f"timeout_seconds={self.timeout_seconds!r})"
        )


def build_query_params(city: str, api_key: str) -> dict[str, str]:
    """Returns the query string parameters for a metric current-weather lookup."""
    return {"q": city, "appid": api_key, "units": "metric"}


def redact_api_key(text: str, api_key: str) -> str:
    """Masks the API key in text, including its URL-encoded forms.

        requests puts the full request URL, query string included, in the
        message of connection and proxy errors.
    """
    for form in {api_key, quote(api_key, safe=""), quote_plus(api_key)}:
        if form:
            text = text.replace(form, "***")
    return text


def _parse_weather(response: requests.Response) -> Weather:
    try:
        payload = response.json()
    except ValueError as err:
        raise ConnectionOrDataError(f"invalid JSON body: {err}") from err

    if not isinstance(payload, dict):
        raise ConnectionOrDataError(f"expected a JSON object, got {type(payload).__name__}")

    return normalize_weather_response(payload)


def _fetch_with_retry(city: str, config: FetchConfig, session: requests.Session,
                      sleep: Callable[[float], None]) -> Weather:
    params = build_query_params(city, config.api_key)

    for attempt in range(1, config.max_retries + 1):
        is_last_attempt = attempt == config.max_retries

        try:
            response = session.get(OPEN_WEATHER_MAP_ENDPOINT, params=params, timeout=config.timeout_seconds)
        except requests.exceptions.Timeout:
            if is_last_attempt:
                raise TimeoutExhaustedError(config.max_retries)
            delay = config.timeout_delay(attempt)
            logger.warning(f"Timeout on attempt {attempt}/{config.max_retries}. Retrying in {delay:g}s...")
            sleep(delay)
            continue
        except requests.exceptions.RequestException as err:
            raise ConnectionOrDataError(redact_api_key(str(err), config.api_key)) from err

        status_code = response.status_code

        if status_code == 200:
            return _parse_weather(response)
        elif status_code == 404:
            raise CityNotFoundError(city)
        elif status_code == 401:
            raise InvalidCredentialError()
        elif status_code == 429 or status_code >= 500:
            if is_last_attempt:
                raise RetriesExhaustedError(status_code, attempt)
            delay = config.status_delay(attempt)
            logger.warning(f"Temporary error (status {status_code}) on attempt "
                           f"{attempt}/{config.max_retries}. Retrying in {delay:g}s...")
            sleep(delay)
        else:
            raise UnexpectedStatusError(status_code)

    raise RetryLogicExhaustedError(config.max_retries)


def fetch_weather(city: str, config: FetchConfig, session: Optional[requests.Session] = None,
                  sleep: Callable[[float], None] = time.sleep) -> Weather:
    """Fetches the current weather for a city from OpenWeatherMap.

        Validates the inputs, then issues up to config.max_retries GET
        requests. Rate-limit/server errors and timeouts are retried on their
        own delay schedules; every other failure ends the lookup at once.

        Args:
            city: The city to query (e.g. "London" or "Querétaro,MX").
                Surrounding whitespace is ignored.
            config: API key, attempt budget, timeout and delay schedules.
            session: HTTP session to send requests with. A private session
                is opened and closed when omitted.
            sleep: Function used to wait between attempts.

        Returns:
            A Weather value built from the 200 response.

        Raises:
            MissingCredentialError: If config.api_key is empty.
            InvalidInputError: If city is empty after trimming.
            CityNotFoundError: On a 404 response.
            InvalidCredentialError: On a 401 response.
            RetriesExhaustedError: If the last attempt got a 429 or 5xx.
            TimeoutExhaustedError: If the last attempt timed out.
            UnexpectedStatusError: On any other non-200 status.
            ConnectionOrDataError: On a transport failure or malformed body.
            RetryLogicExhaustedError: If the loop ends without an outcome.
    """
    if not config.api_key:
        raise MissingCredentialError()

    clean_city = (city or "").strip()
    if not clean_city:
        raise InvalidInputError(city)

    if session is None:
        with requests.Session() as own_session:
            return _fetch_with_retry(clean_city, config, own_session, sleep)

    return _fetch_with_retry(clean_city, config, session, sleep)
