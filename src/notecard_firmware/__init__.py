"""Notecard firmware resolution.

Determines which firmware artifact a Notecard should receive from the
public firmware bucket:
- Parsing bucket listings and extracting versions from object keys
- Classifying Notecard models into hardware types
- Selecting the artifact for "latest" or an explicit version
"""

from notecard_firmware.client import BucketListingClient
from notecard_firmware.config import ResolverConfig, load_config
from notecard_firmware.errors import (
    ConfigError,
    FetchError,
    InvalidVersionError,
    NotecardFirmwareError,
)
from notecard_firmware.hardware import HardwareTypeClassifier, classify_model
from notecard_firmware.listing import (
    ArtifactFormat,
    extract_versions,
    filter_keys_for_hardware_type,
    parse_keys,
)
from notecard_firmware.models import (
    LATEST,
    FailureKind,
    ResolutionFailure,
    ResolutionRequest,
    SelectedArtifact,
    UpdateChannel,
    UpToDate,
)
from notecard_firmware.resolver import FirmwareResolver, select_artifact
from notecard_firmware.versioning import Version, compare_versions, parse_version

__version__ = "1.0.0"

__all__ = [
    "ArtifactFormat",
    "BucketListingClient",
    "ConfigError",
    "FailureKind",
    "FetchError",
    "FirmwareResolver",
    "HardwareTypeClassifier",
    "InvalidVersionError",
    "LATEST",
    "NotecardFirmwareError",
    "ResolutionFailure",
    "ResolutionRequest",
    "ResolverConfig",
    "SelectedArtifact",
    "UpToDate",
    "UpdateChannel",
    "Version",
    "classify_model",
    "compare_versions",
    "extract_versions",
    "filter_keys_for_hardware_type",
    "load_config",
    "parse_keys",
    "parse_version",
    "select_artifact",
]
