"""AWS Lambda Handler and Request Orchestration Module.

This module is the HTTP entry point of the weather client. It manages the
lifecycle of a request:
    1. Extracting the 'city' query parameter.
    2. Loading the client configuration (API key, attempt budget, timeout).
    3. Fetching the current weather through the OpenWeatherMap client.
    4. Mapping the outcome to a standard HTTP status code and JSON body.

Environment Requirements:
    - OPEN_WEATHER_API_KEY must be set (directly or through a .env file).
"""
import json
import logging
from typing import Optional, TYPE_CHECKING

# makes AWS specific type hinting available in IDE, without bundling the library when deploying to the cloud
if TYPE_CHECKING:
    from aws_lambda_typing.context import Context

import config
from open_weather_map import (
    CityNotFoundError,
    InvalidCredentialError,
    InvalidInputError,
    MissingCredentialError,
    RetriesExhaustedError,
    TimeoutExhaustedError,
    fetch_weather,
)
from weather_service import WeatherServiceError

logger = logging.getLogger()
logger.setLevel(logging.INFO)

config.load_env_file()


def get_request_city_param(event: dict) -> Optional[str]:
    """Retrieves the 'city' query string parameter from the incoming request."""
    return (event.get('queryStringParameters') or {}).get('city', None)


def get_response(status_code: int, context: "Context", content_type: str = "application/json", **kwargs) -> dict:
    """Constructs a standardized HTTP response for the Lambda Gateway.

        Args:
            status_code: HTTP status code to return.
            context: AWS Lambda context object (used for Request ID).
            content_type: MIME type for the response header.
            **kwargs: Arbitrary key-value pairs to include in the JSON body.

        Returns:
            A dictionary formatted as an AWS Lambda HTTP response.
    """
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': content_type,
            "X-Request-ID": context.aws_request_id
        },
        'body': json.dumps({
            "requestId": context.aws_request_id,
        } | kwargs)  # add kwargs to body dict
    }


def handle_bad_request(context: "Context", details: str) -> dict:
    """Returns a formatted HTTP 400 Bad Request response for a missing or blank city."""
    return get_response(400, context, error="Bad Request",
                        message="A valid 'city' query parameter is required.",
                        details=details)


def handle_city_not_found(context: "Context", error: CityNotFoundError) -> dict:
    """Returns a formatted HTTP 404 Not Found response when the provider does not know the city."""
    return get_response(404, context, error="Not found", message="No data available for the specified city.",
                        details=str(error))


def handle_internal_server_error(context: "Context") -> dict:
    """Returns a formatted HTTP 500 response when the API key is missing or rejected."""
    return get_response(500, context, error="Internal Server Error",
                        message="The weather service is misconfigured.",
                        details="Please contact the service owner.")


def handle_service_unavailable_error(context: "Context", error: WeatherServiceError) -> dict:
    """Returns a formatted HTTP 503 response after the retry budget is spent."""
    return get_response(503, context, error="Service Unavailable",
                        message="Service is currently unavailable.",
                        details=f"{error} Please try again later.")


def handle_bad_gateway_error(context: "Context", error: WeatherServiceError) -> dict:
    """Returns a formatted HTTP 502 response for any other provider failure."""
    return get_response(502, context, error="Bad Gateway",
                        message="The weather provider returned an unusable response.",
                        details=str(error))


def lambda_handler(event, context: "Context") -> dict:
    """The primary execution entry point for the AWS Lambda function.

        Execution Flow:
            1. Parse and validate the 'city' query parameter.
            2. Build the client configuration from the environment.
            3. Fetch the current weather, retrying transient failures.
            4. Return the weather as JSON, or an appropriate error status.
    """
    city = get_request_city_param(event)

    if city is None:
        logger.info("Request missing 'city' parameter")
        return handle_bad_request(context, "Please include ?city=CityName in the request URL.")

    try:
        weather = fetch_weather(city, config.load_fetch_config())

        return get_response(200, context, city=weather.city, weather=weather.to_json())
    except InvalidInputError as e:
        logger.info(f'Rejected blank city parameter: {e!r}')
        return handle_bad_request(context, str(e))
    except CityNotFoundError as e:
        logger.info(f'City Weather data fetching failed as city was not found: {e!r}')
        return handle_city_not_found(context, e)
    except (MissingCredentialError, InvalidCredentialError) as e:
        logger.error(f'Weather service credentials are unusable: {e!r}')
        return handle_internal_server_error(context)
    except (RetriesExhaustedError, TimeoutExhaustedError) as e:
        logger.warning(f'City Weather data fetching gave up after retries: {e!r}')
        return handle_service_unavailable_error(context, e)
    except WeatherServiceError as e:
        logger.error(f'City Weather data fetching failed: {e!r}')
        return handle_bad_gateway_error(context, e)
