"""AdStudio Image Generator - AI advertising images from product photos."""

__version__ = "0.1.0"

from adstudio.core.config import AdStudioConfig, config

__all__ = [
    "AdStudioConfig",
    "config",
]
