"""Core building blocks shared by the relay API and the wizard UI.

Modules
-------
config
    Pydantic Settings configuration loaded from ``ADSTUDIO_*`` variables.
errors
    Error taxonomy shared by the relay and its callers.
rules
    Upload and ad-count limits enforced on both sides of the wire.
"""

from adstudio.core.config import AdStudioConfig, config
from adstudio.core.errors import (
    AdStudioError,
    ErrorKind,
    UnexpectedError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "AdStudioConfig",
    "config",
    "AdStudioError",
    "ErrorKind",
    "UnexpectedError",
    "UpstreamError",
    "ValidationError",
]
