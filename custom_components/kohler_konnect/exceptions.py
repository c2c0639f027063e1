"""Exceptions raised by the Kohler Konnect client."""

from __future__ import annotations


class KohlerApiClientError(Exception):
    """Exception to indicate a general API error."""


class KohlerApiClientCommunicationError(KohlerApiClientError):
    """Exception to indicate a transport error (refused, reset, DNS)."""


class KohlerApiClientTimeoutError(KohlerApiClientCommunicationError):
    """Exception to indicate the exchange exceeded its deadline."""


class KohlerApiClientDecodeError(KohlerApiClientError):
    """Exception to indicate a body that holds no recoverable JSON."""

    def __init__(self, message: str, sample: str = "") -> None:
        """Initialize with the leading part of the offending body."""
        super().__init__(message)
        self.sample = sample


class KohlerApiClientCommandRejectedError(KohlerApiClientError):
    """Exception to indicate the controller refused a command."""
