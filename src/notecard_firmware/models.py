"""Request and result types for firmware resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notecard_firmware.versioning import Version, parse_version

LATEST = "latest"


class UpdateChannel(str, Enum):
    """Release track; also the listing prefix."""

    LTS = "LTS"
    DEVREL = "DevRel"
    NIGHTLY = "nightly"


class FailureKind(str, Enum):
    """Why a resolution did not produce an artifact."""

    FETCH_FAILED = "fetch_failed"
    NO_ARTIFACTS_FOR_HARDWARE_TYPE = "no_artifacts_for_hardware_type"
    VERSION_NOT_FOUND = "version_not_found"
    NO_VALID_VERSIONS_FOUND = "no_valid_versions_found"
    CLASSIFICATION_FAILED = "classification_failed"


class ResolutionRequest(BaseModel):
    """What the caller wants installed on a device.

    Example:
        >>> ResolutionRequest(channel="LTS", hardware_type="u5",
        ...                   current_version="6.2.5.9")
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    channel: UpdateChannel = Field(
        default=UpdateChannel.LTS,
        description="Release track to resolve against"
    )

    hardware_type: str = Field(
        ...,
        description="Hardware type code; may be the empty string"
    )

    requested_version: Union[Version, Literal["latest"]] = Field(
        default=LATEST,
        description="Exact version to install, or 'latest'"
    )

    current_version: Optional[Version] = Field(
        default=None,
        description="Version the device runs now, if known"
    )

    @field_validator("requested_version", mode="before")
    @classmethod
    def _parse_requested_version(cls, value):
        if value is None:
            return LATEST
        if isinstance(value, str) and value.strip() in ("", LATEST):
            return LATEST
        return parse_version(value)

    @field_validator("current_version", mode="before")
    @classmethod
    def _parse_current_version(cls, value):
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        return parse_version(value)

    @property
    def wants_latest(self) -> bool:
        return not isinstance(self.requested_version, Version)


@dataclass(frozen=True)
class UpToDate:
    """The device already runs the latest available version."""

    current_version: Version
    latest_version: Version


@dataclass(frozen=True)
class SelectedArtifact:
    """Artifact the device should download."""

    url: str
    version: Version
    key: str


@dataclass(frozen=True)
class ResolutionFailure:
    """Resolution stopped; message is meant for an operator."""

    kind: FailureKind
    message: str
    available_versions: Tuple[Version, ...] = ()
    status_code: Optional[int] = None


ResolutionResult = Union[UpToDate, SelectedArtifact, ResolutionFailure]
