"""HTTP transport for the game database and token endpoint."""

from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()

USER_AGENT = "gamedex/0.1.0"


class HttpClientService:
    """Thin async HTTP client with timeout handling.

    Requests are made exactly once; status handling is left to the caller so
    it can map failures onto its own error types.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            transport: Optional transport override (used by tests to fake the network)
        """
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            verify=verify_ssl,
            transport=transport,
        )

        log.info(
            "HTTP client service initialized",
            timeout=timeout,
            verify_ssl=verify_ssl,
        )

    async def post(
        self,
        url: str,
        content: str | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a single POST request.

        Args:
            url: The URL to request
            content: Raw text body
            json: JSON-serializable body (ignored when ``content`` is given)
            headers: Optional additional headers

        Returns:
            HTTP response object, whatever its status

        Raises:
            httpx.RequestError: If the request could not be completed
        """
        log.debug("Making HTTP POST request", url=url)

        try:
            if content is not None:
                response = await self._client.post(url, content=content.encode("utf-8"), headers=headers)
            else:
                response = await self._client.post(url, json=json, headers=headers)
        except httpx.RequestError as e:
            log.warning(
                "HTTP POST request failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        log.debug(
            "HTTP POST request completed",
            url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
