"""Error hierarchy for fetch, geocode and output failures.

Transient failures (should retry) are kept apart from permanent ones (should
not retry) so tenacity decorators can classify them by type.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    async def fetch(url: str) -> str:
        ...

Malformed schedule markup is never an error: unparseable tokens and rows are
dropped where they are found.
"""


class ScrapingError(Exception):
    """Base exception for all scraping errors."""

    pass


class TransientError(ScrapingError):
    """Temporary failure that may succeed on retry.

    Examples: page load timeouts, 503 Service Unavailable, dropped connections.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded - needs longer backoff.

    Nominatim answers 429 when requests come faster than once per second.
    """

    pass


class PermanentError(ScrapingError):
    """Failure that won't succeed on retry."""

    pass


class FetchError(PermanentError):
    """A facility document could not be fetched, even after retries."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class GeocodeError(PermanentError):
    """The geocoding service returned no usable coordinates for an address."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Could not geocode {address!r}: {reason}")
        self.address = address
        self.reason = reason


class OutputError(PermanentError):
    """The final schedule could not be written. Terminates the run."""

    pass
