"""Firmware resolution.

Given a channel listing, a hardware type and the version the caller asked
for, pick the single artifact the device should download, or report that
it is already up to date.

Selection rules:
    - Only keys containing ``-<hardware_type>-`` are considered.
    - "latest" picks the highest version present. A device whose current
      version is at or above it is up to date.
    - An explicit version is installed even if the device already runs
      something newer.
    - When one version is published in several formats the BIN file is
      preferred over the DFU package (see listing.supersedes).
"""

import logging
from typing import List, Optional, Sequence, Union

from notecard_firmware.client import BucketListingClient
from notecard_firmware.errors import FetchError
from notecard_firmware.hardware import HardwareTypeClassifier
from notecard_firmware.listing import (
    ArtifactFormat,
    artifact_format,
    extract_versions,
    filter_keys_for_hardware_type,
    key_version,
    parse_keys,
    supersedes,
)
from notecard_firmware.models import (
    LATEST,
    FailureKind,
    ResolutionFailure,
    ResolutionRequest,
    ResolutionResult,
    SelectedArtifact,
    UpdateChannel,
    UpToDate,
)
from notecard_firmware.versioning import Version

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_HOST = "https://notecard-firmware.s3.amazonaws.com"
NO_VERSION = Version((0, 0, 0, 0))


def artifact_url(artifact_host: str, key: str) -> str:
    """Public download URL for key."""
    return f"{artifact_host.rstrip('/')}/{key}"


def _format_versions(versions: Sequence[Version]) -> str:
    return ", ".join(str(v) for v in versions) or "None"


class _Candidate:
    """Best key seen so far while scanning a listing."""

    def __init__(self) -> None:
        self.key: Optional[str] = None
        self.version: Optional[Version] = None
        self.format: Optional[ArtifactFormat] = None

    def take(self, key: str, version: Version, fmt: ArtifactFormat) -> None:
        self.key = key
        self.version = version
        self.format = fmt


def _select_latest(keys: Sequence[str]) -> _Candidate:
    best = _Candidate()
    for key in keys:
        version = key_version(key)
        if version is None:
            continue
        fmt = artifact_format(key)

        if best.version is None or version > best.version:
            best.take(key, version, fmt)
        elif version == best.version and supersedes(fmt, best.format):
            best.take(key, version, fmt)
    return best


def _select_exact(keys: Sequence[str], wanted: Version) -> _Candidate:
    best = _Candidate()
    for key in keys:
        version = key_version(key)
        if version is None or version != wanted:
            continue
        fmt = artifact_format(key)

        if supersedes(fmt, best.format):
            best.take(key, version, fmt)
    return best


def select_artifact(
    keys: Sequence[str],
    request: ResolutionRequest,
    artifact_host: str = DEFAULT_ARTIFACT_HOST
) -> ResolutionResult:
    """Choose the artifact for request from already-parsed listing keys.

    Pure function; FirmwareResolver.resolve() wraps it with the fetch.

    Args:
        keys: Listing keys in listing order
        request: Resolution request
        artifact_host: Base URL the selected key is appended to

    Returns:
        UpToDate, SelectedArtifact or ResolutionFailure
    """
    channel = request.channel.value
    hardware_type = request.hardware_type

    relevant = filter_keys_for_hardware_type(keys, hardware_type)
    logger.debug(f"Found {len(relevant)} relevant keys for type '{hardware_type}'")

    if not relevant:
        return ResolutionFailure(
            kind=FailureKind.NO_ARTIFACTS_FOR_HARDWARE_TYPE,
            message=(
                f"No firmware files found for Notecard type '{hardware_type}' "
                f"with prefix '{channel}'."
            )
        )

    available = tuple(extract_versions(relevant))
    logger.debug(f"Found available versions: {_format_versions(available)}")

    if request.wants_latest:
        best = _select_latest(relevant)

        latest = best.version if best.version is not None else NO_VERSION
        logger.debug(f"Determined latest available version: {latest}")

        # Checked before the empty case: any known version is at least 0.0.0.0
        current = request.current_version
        if current is not None and current >= latest:
            logger.info(f"Current version {current} is up-to-date with latest {latest}")
            return UpToDate(current_version=current, latest_version=latest)

        if best.version is None:
            return ResolutionFailure(
                kind=FailureKind.NO_VALID_VERSIONS_FOUND,
                message=(
                    f"Could not find any valid firmware versions for Notecard "
                    f"type '{hardware_type}'."
                ),
                available_versions=available
            )
    else:
        best = _select_exact(relevant, request.requested_version)

        if best.key is None:
            return ResolutionFailure(
                kind=FailureKind.VERSION_NOT_FOUND,
                message=(
                    f"Firmware version '{request.requested_version}' not found for "
                    f"Notecard type '{hardware_type}'. "
                    f"Available: {_format_versions(available)}"
                ),
                available_versions=available
            )

    url = artifact_url(artifact_host, best.key)
    logger.info(f"Selected firmware key '{best.key}' resulting in URL: {url}")
    return SelectedArtifact(url=url, version=best.version, key=best.key)


class FirmwareResolver:
    """Resolves firmware downloads against the live bucket listing.

    Holds no state between calls besides its HTTP client, so one resolver
    can serve concurrent requests for different devices.

    Example:
        >>> async with FirmwareResolver(BucketListingClient()) as resolver:
        ...     result = await resolver.resolve_for_model("LTS", "NOTE-WBNA")
    """

    def __init__(
        self,
        client: BucketListingClient,
        artifact_host: str = DEFAULT_ARTIFACT_HOST,
        classifier: Optional[HardwareTypeClassifier] = None
    ) -> None:
        """Initialize resolver.

        Args:
            client: Listing client used for every fetch
            artifact_host: Base URL for artifact downloads
            classifier: Model classifier; defaults to the built-in table
        """
        self.client = client
        self.artifact_host = artifact_host
        self.classifier = classifier or HardwareTypeClassifier()

    @classmethod
    def from_config(cls, config, transport=None) -> "FirmwareResolver":
        """Build a resolver and its client from a ResolverConfig."""
        client = BucketListingClient(
            listing_url=config.listing_url,
            timeout=config.request_timeout_sec,
            transport=transport
        )
        return cls(
            client=client,
            artifact_host=config.artifact_host,
            classifier=HardwareTypeClassifier(config.hardware_types)
        )

    async def __aenter__(self) -> "FirmwareResolver":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def _fetch_keys(self, channel: UpdateChannel) -> List[str]:
        payload = await self.client.fetch_listing(channel)
        keys = parse_keys(payload)
        logger.debug(f"Found {len(keys)} keys in XML for prefix '{channel.value}'")
        return keys

    @staticmethod
    def _fetch_failure(error: FetchError) -> ResolutionFailure:
        return ResolutionFailure(
            kind=FailureKind.FETCH_FAILED,
            message=error.message,
            status_code=error.status_code
        )

    async def list_versions(
        self,
        channel: Union[UpdateChannel, str],
        hardware_type: str
    ) -> Union[List[Version], ResolutionFailure]:
        """List the versions published for a hardware type on a channel.

        An empty channel or one without files for the hardware type is
        not an error and yields an empty list.

        Returns:
            Distinct versions in listing order, or a FETCH_FAILED failure
        """
        channel = UpdateChannel(channel)

        try:
            keys = await self._fetch_keys(channel)
        except FetchError as e:
            logger.error(f"Error listing available firmware versions: {e.message}")
            return self._fetch_failure(e)

        if not keys:
            logger.warning(
                f"No firmware files found in listing for prefix '{channel.value}'"
            )
            return []

        relevant = filter_keys_for_hardware_type(keys, hardware_type)
        if not relevant:
            logger.warning(
                f"No firmware files found for Notecard type '{hardware_type}' "
                f"with prefix '{channel.value}'"
            )
            return []

        versions = extract_versions(relevant)
        logger.info(f"Extracted available versions: {_format_versions(versions)}")
        return versions

    async def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        """Resolve request against the current listing for its channel."""
        try:
            keys = await self._fetch_keys(request.channel)
        except FetchError as e:
            logger.error(f"Error finding firmware URL: {e.message}")
            return self._fetch_failure(e)

        result = select_artifact(keys, request, self.artifact_host)
        if isinstance(result, ResolutionFailure):
            logger.error(f"Error finding firmware URL: {result.message}")
        return result

    def _classification_failure(self, model: Optional[str]) -> ResolutionFailure:
        logger.error(f"Could not determine Notecard type for model '{model}'")
        return ResolutionFailure(
            kind=FailureKind.CLASSIFICATION_FAILED,
            message=f"Could not determine Notecard type for model '{model}'."
        )

    async def list_versions_for_model(
        self,
        channel: Union[UpdateChannel, str],
        model: Optional[str]
    ) -> Union[List[Version], ResolutionFailure]:
        """Classify model, then list_versions() for its hardware type."""
        hardware_type = self.classifier.classify(model)
        if hardware_type is None:
            return self._classification_failure(model)
        return await self.list_versions(channel, hardware_type)

    async def resolve_for_model(
        self,
        channel: Union[UpdateChannel, str],
        model: Optional[str],
        requested_version: Union[Version, str, None] = LATEST,
        current_version: Union[Version, str, None] = None
    ) -> ResolutionResult:
        """Classify model, then resolve() for its hardware type.

        Nothing is fetched when the model cannot be classified.

        Raises:
            pydantic.ValidationError: If channel or a version string is malformed
        """
        hardware_type = self.classifier.classify(model)
        if hardware_type is None:
            return self._classification_failure(model)

        logger.info(f"Determined notecardType: {hardware_type!r} for model: {model}")

        request = ResolutionRequest(
            channel=channel,
            hardware_type=hardware_type,
            requested_version=requested_version,
            current_version=current_version
        )
        return await self.resolve(request)
