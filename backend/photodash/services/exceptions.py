"""
Error types raised by the record and upload services.
"""
from typing import Optional


class DashboardError(Exception):
    """Base exception for all dashboard errors."""


class ConfigurationError(DashboardError):
    """Raised when required configuration is missing or malformed."""


class UpstreamError(DashboardError):
    """Raised when a call to the Baserow API fails."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class UploadError(DashboardError):
    """Base exception for photo upload failures."""


class MethodNotAllowed(UploadError):
    """Raised when the upload endpoint is called with anything but POST."""

    allowed = ("POST",)

    def __init__(self, method: str):
        super().__init__("Method Not Allowed")
        self.method = method


class MalformedRequest(UploadError):
    """Raised when the request body cannot be parsed as multipart form data."""


class MissingFile(UploadError):
    """Raised when no acceptable image was sent in the `file` part."""


class InvalidRecordId(UploadError):
    """Raised when `recordId` is absent or not a positive integer."""


class FileTooLarge(UploadError):
    """Raised when an uploaded image exceeds the per-part size cap."""
