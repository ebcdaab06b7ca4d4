"""
Remote HTTP fetch for asset downloads.

Thin wrapper over requests. Non-200 responses are returned as-is;
only transport failures raise.
"""

from typing import Optional
import requests
import structlog

from config.settings import settings
from exceptions import AssetFetchError
from models.asset import FetchResponse

logger = structlog.get_logger(__name__)


class HttpFetcher:
    """
    GET remote URLs with a bounded timeout.

    timeout=None means the configured default (image_fetch_timeout).
    """

    def __init__(
        self,
        default_timeout: Optional[float] = None,
        user_agent: Optional[str] = None
    ):
        self.default_timeout = default_timeout or settings.image_fetch_timeout
        self.headers = {"User-Agent": user_agent or settings.http_user_agent}

    def get(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        """
        Fetch a URL.

        Args:
            url: Remote URL
            timeout: Seconds to wait (connect and read)

        Returns:
            FetchResponse with status code, body and lowercased headers

        Raises:
            AssetFetchError: On network failure, timeout or invalid URL
        """
        timeout = timeout or self.default_timeout
        logger.debug("http_fetch_start", url=url, timeout=timeout)

        try:
            response = requests.get(
                url,
                headers=self.headers,
                timeout=timeout,
                allow_redirects=True
            )
        except requests.RequestException as e:
            logger.warning(
                "http_fetch_failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__
            )
            raise AssetFetchError(url, f"Request failed: {e}") from e

        headers = {k.lower(): v for k, v in response.headers.items()}

        logger.debug(
            "http_fetch_complete",
            url=url,
            status_code=response.status_code,
            size_bytes=len(response.content)
        )

        return FetchResponse(
            status_code=response.status_code,
            body=response.content,
            headers=headers
        )


# Singleton instance for convenience
_http_fetcher: Optional[HttpFetcher] = None

def get_http_fetcher() -> HttpFetcher:
    """Get or create HttpFetcher instance."""
    global _http_fetcher
    if _http_fetcher is None:
        _http_fetcher = HttpFetcher()
    return _http_fetcher
