"""Root of the exception hierarchy for the current-weather client.

Every failure raised while fetching or normalizing weather data derives
from WeatherServiceError, so a caller rendering results only needs a
single except clause to separate managed failures from programming errors.

Example:
    try:
        weather = fetch_weather(city, config)
    except WeatherServiceError as e:
        logger.error(f"Weather lookup failed: {e}")
"""


class WeatherServiceError(Exception):
    """Base class for any exception raised while retrieving weather data.

        Subclasses carry the details (status code, attempt count, underlying
        message) needed to build a human-readable message for the user.
    """

    def __repr__(self):
        """Returns a string representation naming the concrete error class."""
        return f"{self.__class__.__name__}({str(self)!r})"
