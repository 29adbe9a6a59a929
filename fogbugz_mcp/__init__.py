"""FogBugz MCP - cached FogBugz reference data and request layer.

Talks to the FogBugz JSON API and exposes dependency-ordered, cached
resources (projects, areas, milestones, people, tags, priorities,
categories, statuses) to calling tools.
"""

__version__ = "1.0.0"

from .api import FileAttachment, FogBugzClient, FogBugzTransport, with_retry
from .config import FogBugzConfig, load_config
from .errors import (
    ConfigurationError,
    DependencyOrderError,
    FogBugzError,
    TransportError,
    ValidationWarning,
)
from .fogbugz_logging import get_logger, setup_logging
from .resources import ResourceCache, ResourceOrchestrator

__all__ = [
    "FogBugzConfig",
    "load_config",
    "FogBugzClient",
    "FogBugzTransport",
    "FileAttachment",
    "with_retry",
    "ResourceCache",
    "ResourceOrchestrator",
    "FogBugzError",
    "ConfigurationError",
    "TransportError",
    "DependencyOrderError",
    "ValidationWarning",
    "get_logger",
    "setup_logging",
]
