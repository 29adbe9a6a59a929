"""Request layer for the FogBugz JSON API."""

from .base import IntegrationClient, with_retry
from .client import FogBugzClient
from .transport import FileAttachment, FogBugzTransport

__all__ = [
    "IntegrationClient",
    "with_retry",
    "FogBugzClient",
    "FogBugzTransport",
    "FileAttachment",
]
