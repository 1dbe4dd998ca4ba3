"""Pytest configuration and shared fixtures."""

import httpx
import pytest

from notecard_firmware.client import BucketListingClient
from notecard_firmware.resolver import FirmwareResolver

ARTIFACT_HOST = "https://notecard-firmware.s3.amazonaws.com"


def make_listing(*keys: str) -> str:
    """Build an S3-style ListBucketResult document."""
    contents = "".join(
        f"<Contents><Key>{key}</Key><Size>1024</Size>"
        f"<StorageClass>STANDARD</StorageClass></Contents>"
        for key in keys
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        "<Name>notecard-firmware</Name><Prefix>LTS</Prefix>"
        f"<IsTruncated>false</IsTruncated>{contents}</ListBucketResult>"
    )


@pytest.fixture
def lts_keys():
    """Keys of a small LTS listing with mixed hardware types and formats."""
    return [
        "LTS/notecard-u5-6.2.5.16868.dfu",
        "LTS/notecard-u5-6.2.5.16868.bin",
        "LTS/notecard-u5-6.1.1.16026.bin",
        "LTS/notecard-wl-6.2.5.16868.bin",
        "LTS/notecard--5.3.1.16292.bin",
        "LTS/README.txt",
    ]


@pytest.fixture
def lts_listing(lts_keys):
    """Listing payload for lts_keys."""
    return make_listing(*lts_keys)


@pytest.fixture
def listing_transport():
    """Build an httpx.MockTransport serving a listing and recording requests."""

    def _build(payload: str = "", status_code: int = 200, requests=None):
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            return httpx.Response(status_code, text=payload)

        return httpx.MockTransport(handler)

    return _build


@pytest.fixture
def resolver_for(listing_transport):
    """Build a FirmwareResolver whose client serves the given listing."""

    def _build(payload: str = "", status_code: int = 200, requests=None):
        client = BucketListingClient(
            timeout=5.0,
            transport=listing_transport(payload, status_code, requests)
        )
        return FirmwareResolver(client, artifact_host=ARTIFACT_HOST)

    return _build


@pytest.fixture
def listing_factory():
    """Provide make_listing to tests."""
    return make_listing


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
