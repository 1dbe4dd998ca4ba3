"""Exceptions raised inside the notecard_firmware package."""

from typing import Optional


class NotecardFirmwareError(Exception):
    """Base class for all package errors."""


class InvalidVersionError(NotecardFirmwareError, ValueError):
    """Version text could not be parsed into a Version."""


class ConfigError(NotecardFirmwareError):
    """Configuration could not be loaded or validated."""


class FetchError(NotecardFirmwareError):
    """Bucket listing could not be retrieved.

    Attributes:
        status_code: HTTP status of the failed response, or None when the
            request never produced one (timeout, DNS, connection reset)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
