"""Tests for the bucket listing client."""

import httpx
import pytest

from notecard_firmware.client import DEFAULT_LISTING_URL, BucketListingClient
from notecard_firmware.errors import FetchError
from notecard_firmware.models import UpdateChannel


@pytest.mark.unit
class TestBucketListingClient:
    """Test BucketListingClient.fetch_listing."""

    @pytest.mark.asyncio
    async def test_fetch_uses_channel_prefix(self, listing_transport):
        """Test the channel is sent as the prefix parameter."""
        requests = []
        transport = listing_transport("<Key>a</Key>", requests=requests)

        async with BucketListingClient(transport=transport) as client:
            payload = await client.fetch_listing(UpdateChannel.NIGHTLY)

        assert payload == "<Key>a</Key>"
        assert len(requests) == 1
        assert requests[0].method == "GET"
        assert requests[0].url.params["prefix"] == "nightly"
        assert str(requests[0].url).startswith(DEFAULT_LISTING_URL)

    @pytest.mark.asyncio
    async def test_error_status_raises(self, listing_transport):
        """Test non-success responses raise FetchError with the status."""
        transport = listing_transport("denied", status_code=403)

        async with BucketListingClient(transport=transport) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch_listing("LTS")

        assert exc_info.value.status_code == 403
        assert "403 Forbidden" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Test connection failures raise FetchError without a status."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with BucketListingClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch_listing("LTS")

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        """Test timeouts surface as FetchError."""
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with BucketListingClient(timeout=2.0, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch_listing("LTS", timeout=0.5)

        assert "timed out after 0.5s" in exc_info.value.message
