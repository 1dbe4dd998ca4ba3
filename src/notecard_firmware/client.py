"""Bucket listing client.

Fetches the object listing of the firmware bucket for one update
channel. The listing is returned as raw text; parsing happens in
notecard_firmware.listing.
"""

import logging
from typing import Optional, Union

import httpx

from notecard_firmware.errors import FetchError
from notecard_firmware.models import UpdateChannel

logger = logging.getLogger(__name__)

DEFAULT_LISTING_URL = "https://s3.us-east-1.amazonaws.com/notecard-firmware"


class BucketListingClient:
    """Reads firmware bucket listings over HTTP.

    The client performs a single GET per call and never retries; a
    failed or timed-out request raises FetchError and the caller decides
    whether to try again.

    Example:
        >>> async with BucketListingClient(timeout=10.0) as client:
        ...     xml = await client.fetch_listing(UpdateChannel.LTS)
    """

    def __init__(
        self,
        listing_url: str = DEFAULT_LISTING_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """Initialize listing client.

        Args:
            listing_url: Bucket listing endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.listing_url = listing_url
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "BucketListingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def fetch_listing(
        self,
        channel: Union[UpdateChannel, str],
        timeout: Optional[float] = None
    ) -> str:
        """Fetch the listing for a channel.

        Args:
            channel: Update channel, used as the listing prefix
            timeout: Per-call timeout overriding the client default

        Returns:
            Listing payload as text

        Raises:
            FetchError: On timeout, transport error or non-success status
        """
        prefix = channel.value if isinstance(channel, UpdateChannel) else str(channel)
        request_timeout = self.timeout if timeout is None else timeout

        logger.info(f"Fetching firmware index: {self.listing_url}?prefix={prefix}")

        try:
            response = await self._client.get(
                self.listing_url,
                params={"prefix": prefix},
                timeout=request_timeout
            )
        except httpx.TimeoutException as e:
            logger.error(f"Timed out fetching firmware index after {request_timeout}s: {e}")
            raise FetchError(
                f"Failed to fetch firmware index: timed out after {request_timeout}s"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch firmware index: {e}")
            raise FetchError(f"Failed to fetch firmware index: {e}") from e

        if not response.is_success:
            logger.error(
                f"Firmware index request failed: {response.status_code} "
                f"{response.reason_phrase}"
            )
            raise FetchError(
                f"Failed to fetch firmware index: {response.status_code} "
                f"{response.reason_phrase}",
                status_code=response.status_code
            )

        return response.text
