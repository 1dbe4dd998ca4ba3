"""Bucket listing parsing and version extraction.

The storage service enumerates objects as XML. Only the text between
``<Key>`` and ``</Key>`` is used; the rest of the document is ignored and
never validated, so truncated or partially malformed listings still yield
whatever keys they contain.
"""

import logging
import re
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from notecard_firmware.versioning import Version

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"<Key>(.*?)</Key>", re.DOTALL)

# -<major>.<minor>.<patch>.<build>.<bin|dfu> at the end of the key
_VERSION_PATTERN = re.compile(r"-(\d+\.\d+\.\d+\.\d+)\.(bin|dfu)$")


class ArtifactFormat(str, Enum):
    """Packaging of a firmware build, in order of flashing preference."""

    BIN = "bin"
    DFU = "dfu"

    @property
    def priority(self) -> int:
        """Higher is preferred."""
        return _FORMAT_PRIORITY[self]


_FORMAT_PRIORITY = {
    ArtifactFormat.BIN: 1,
    ArtifactFormat.DFU: 0,
}

PREFERRED_FORMAT = max(ArtifactFormat, key=lambda f: f.priority)


def supersedes(candidate: ArtifactFormat, incumbent: Optional[ArtifactFormat]) -> bool:
    """Decide whether a key replaces an already-selected key of the same version.

    The preferred format always takes over, even from an earlier key of
    the same format. Any other format only fills an empty slot, so a DFU
    key never displaces an earlier pick.
    """
    if incumbent is None:
        return True
    return candidate is PREFERRED_FORMAT


def parse_keys(payload: str) -> List[str]:
    """Extract object keys from a bucket listing, in listing order.

    Args:
        payload: Raw listing text

    Returns:
        Keys as they appear in the payload; empty if there are none
    """
    if not payload:
        return []
    return _KEY_PATTERN.findall(payload)


def hardware_type_token(hardware_type: str) -> str:
    """Token that marks a key as built for hardware_type."""
    return f"-{hardware_type}-"


def filter_keys_for_hardware_type(keys: Iterable[str], hardware_type: str) -> List[str]:
    """Keep the keys that contain the ``-<hardware_type>-`` token."""
    token = hardware_type_token(hardware_type)
    return [key for key in keys if token in key]


def key_version(key: str) -> Optional[Version]:
    """Version embedded in key, or None if the key does not follow the naming scheme."""
    match = _VERSION_PATTERN.search(key)
    if not match:
        return None
    return Version.parse(match.group(1))


def artifact_format(key: str) -> Optional[ArtifactFormat]:
    """Artifact format named by the key suffix, or None if unrecognized."""
    match = _VERSION_PATTERN.search(key)
    if not match:
        return None
    return ArtifactFormat(match.group(2))


def extract_versions(keys: Sequence[str]) -> List[Version]:
    """Collect the distinct versions encoded in keys.

    Keys that do not carry a version are skipped; listings routinely mix
    firmware with unrelated files under the same prefix. The result keeps
    first-seen order and holds each version once, however many formats
    it was published in.
    """
    versions = {}
    for key in keys:
        version = key_version(key)
        if version is None:
            logger.debug(f"Skipping key without version: {key}")
            continue
        versions.setdefault(version, None)
    return list(versions)
