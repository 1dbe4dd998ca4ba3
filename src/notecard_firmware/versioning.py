"""Dotted-numeric firmware versions.

Notecard firmware is versioned as ``major.minor.patch.build``
(e.g. ``6.2.5.16868``). Components compare numerically, and a missing
trailing component counts as zero, so ``6.2`` equals ``6.2.0.0``.
"""

import functools
import re
from dataclasses import dataclass
from typing import Tuple, Union

from notecard_firmware.errors import InvalidVersionError

_COMPONENT = re.compile(r"^\d+$")


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """Immutable firmware version.

    Equality and ordering follow compare_versions(), not the text the
    version was parsed from.
    """

    parts: Tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            raise InvalidVersionError("Version must have at least one component")
        for part in self.parts:
            if not isinstance(part, int) or isinstance(part, bool) or part < 0:
                raise InvalidVersionError(
                    f"Version components must be non-negative integers, got {self.parts!r}"
                )

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse ``"6.2.5.16868"`` into a Version.

        Raises:
            InvalidVersionError: If the text is empty or any component is
                not a plain non-negative integer
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidVersionError(f"Invalid version: {text!r}")

        components = text.strip().split(".")
        if not all(_COMPONENT.match(c) for c in components):
            raise InvalidVersionError(f"Invalid version: {text!r}")

        return cls(tuple(int(c) for c in components))

    def _normalized(self) -> Tuple[int, ...]:
        parts = list(self.parts)
        while len(parts) > 1 and parts[-1] == 0:
            parts.pop()
        return tuple(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) == 0

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) < 0

    def __hash__(self) -> int:
        return hash(self._normalized())

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


def parse_version(value: Union[str, Version]) -> Version:
    """Return value as a Version, parsing it if it is text."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)


def compare_versions(a: Version, b: Version) -> int:
    """Compare two versions component by component.

    The shorter operand is padded with zeros.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    length = max(len(a.parts), len(b.parts))
    for i in range(length):
        left = a.parts[i] if i < len(a.parts) else 0
        right = b.parts[i] if i < len(b.parts) else 0
        if left > right:
            return 1
        if left < right:
            return -1
    return 0
