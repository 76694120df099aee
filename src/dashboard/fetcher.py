"""HTTP client for the exporter's metrics endpoint."""

from __future__ import annotations

import logging

import httpx

from .errors import ErrorCode, FetchError

logger = logging.getLogger(__name__)

DEFAULT_METRICS_URL = "http://localhost:8080/metrics"
DEFAULT_TIMEOUT = 10.0


class MetricsFetcher:
    """Fetch the raw exposition text from a fixed endpoint.

    Parameters
    ----------
    url:
        Full URL of the metrics endpoint.
    timeout:
        Request timeout in seconds.
    http_client:
        Optional pre-configured ``httpx.AsyncClient`` (for testing).
    """

    def __init__(
        self,
        url: str = DEFAULT_METRICS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self) -> str:
        """GET the exposition body.

        Raises
        ------
        FetchError
            On a non-2xx response, a timeout, or any transport failure.
        """
        try:
            response = await self._client.get(self.url)
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"Timed out after {self._timeout}s fetching {self.url}",
                code=ErrorCode.TIMEOUT,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                f"Failed to fetch {self.url}: {exc}", code=ErrorCode.TRANSPORT
            ) from exc

        if not response.is_success:
            raise FetchError(
                f"HTTP error! status: {response.status_code}",
                code=ErrorCode.HTTP_STATUS,
                status_code=response.status_code,
            )

        logger.debug("Fetched %d bytes from %s", len(response.content), self.url)
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
