"""Notecard hardware type classification.

A Notecard model string such as ``NOTE-WBNA`` or ``NOTE-NBGL-500`` is
mapped to the short hardware type code used in firmware file names.

The table is checked top to bottom and the first entry with any
substring contained in the model wins. Substrings overlap between
entries (``NOTE-NBGL-500`` contains both ``500`` and ``NB``), so the
order below is part of the configuration:

    1. ``""``   - ``500``
    2. ``"u5"`` - ``NB``, ``MB``, ``WB``
    3. ``"wl"`` - ``LW``
    4. ``"s3"`` - ``ESP``

The empty string is a real code (legacy 500-series firmware), distinct
from "not found", which is reported as None.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class HardwareTypeEntry(BaseModel):
    """One row of the classification table."""

    code: str = Field(..., description="Hardware type code used in firmware keys")
    substrings: List[str] = Field(
        ...,
        min_length=1,
        description="Case-sensitive substrings identifying the code in a model string",
    )


DEFAULT_HARDWARE_TYPES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("", ("500",)),
    ("u5", ("NB", "MB", "WB")),
    ("wl", ("LW",)),
    ("s3", ("ESP",)),
)


def default_hardware_type_entries() -> List[HardwareTypeEntry]:
    """Built-in table as config entries."""
    return [
        HardwareTypeEntry(code=code, substrings=list(substrings))
        for code, substrings in DEFAULT_HARDWARE_TYPES
    ]


class HardwareTypeClassifier:
    """Maps model strings to hardware type codes using an ordered table."""

    def __init__(self, entries: Optional[Sequence[HardwareTypeEntry]] = None):
        """Initialize classifier.

        Args:
            entries: Ordered table; defaults to DEFAULT_HARDWARE_TYPES
        """
        if entries is None:
            entries = default_hardware_type_entries()
        self._table: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(
            (entry.code, tuple(entry.substrings)) for entry in entries
        )

    @property
    def table(self) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
        return self._table

    def classify(self, model: Optional[str]) -> Optional[str]:
        """Return the hardware type for model, or None if it is unknown.

        Note that ``""`` is a valid result; test with ``is None``.
        """
        if not model:
            return None

        for code, substrings in self._table:
            if any(substring in model for substring in substrings):
                logger.debug(f"Model {model!r} classified as hardware type {code!r}")
                return code

        logger.debug(f"Model {model!r} matched no hardware type")
        return None


_default_classifier = HardwareTypeClassifier()


def classify_model(model: Optional[str]) -> Optional[str]:
    """Classify model with the built-in table."""
    return _default_classifier.classify(model)
