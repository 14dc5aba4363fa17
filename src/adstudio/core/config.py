"""Configuration management for AdStudio Image Generator.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the ADSTUDIO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (ADSTUDIO_* prefix)
2. .env file in the project root
3. Default values defined in AdStudioConfig

The OpenAI credential is additionally read from the conventional
``OPENAI_API_KEY`` variable so an existing shell setup works unchanged.

Example .env file:
    OPENAI_API_KEY=sk-...
    ADSTUDIO_RESULTS_DIR=/var/lib/adstudio/results
    ADSTUDIO_SERVER_PORT=3001

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The relay service does not read paths from it directly: the API factory
passes ``uploads_dir`` and ``results_dir`` into the service at construction.

Usage Example
-------------
    from adstudio.core.config import config

    print(config.results_dir)
    print(config.image_model)
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdStudioConfig(BaseSettings):
    """Main configuration for AdStudio Image Generator.

    Attributes
    ----------
    External image API:
        openai_api_key : str | None
            Bearer credential for the image API
        openai_base_url : str
            Base URL of the OpenAI-compatible API (no trailing slash)
        image_model : str
            Model identifier sent with every edit request
        image_size : str
            Fixed square output size requested from the API
        upstream_timeout : float | None
            Seconds to wait for the API; None waits indefinitely

    Paths:
        uploads_dir : Path
            Transient storage for received source images
        results_dir : Path
            Generated images, served read-only under /results
        frontend_dir : Path
            Built UI assets served at the site root

    Server Settings:
        server_host : str
            Relay bind address
        server_port : int
            Relay port

    UI Settings:
        relay_url : str
            Base URL the wizard posts submissions to
        public_relay_url : str | None
            Base URL browsers use to fetch results; None uses relay_url
        gradio_server_name : str
            Wizard bind address
        gradio_server_port : int
            Wizard port
        gradio_share : bool
            Create public gradio.live link (keep False for local-only)

    Notes
    -----
    - uploads_dir and results_dir are created automatically
    - To modify config, set environment variables and restart the application
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ADSTUDIO_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # External image API
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ADSTUDIO_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="Bearer credential for the image generation API",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the image generation API",
    )
    image_model: str = Field(
        default="gpt-image-1",
        description="Model identifier for image edit requests",
    )
    image_size: str = Field(
        default="1024x1024",
        description="Square output size requested from the API",
    )
    upstream_timeout: float | None = Field(
        default=None,
        description="Seconds to wait for the image API (None = no timeout)",
        gt=0,
    )

    # Paths
    uploads_dir: Path = Field(
        default=Path("uploads"),
        description="Directory for transient source image uploads",
    )
    results_dir: Path = Field(
        default=Path("results"),
        description="Directory to save generated images",
    )
    frontend_dir: Path = Field(
        default=Path("frontend/dist"),
        description="Directory holding the built UI (index.html and assets)",
    )

    # Relay server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Relay server bind address",
    )
    server_port: int = Field(
        default=3001,
        description="Relay server port",
        ge=1024,
        le=65535,
    )

    # UI settings
    relay_url: str = Field(
        default="http://127.0.0.1:3001",
        description="Relay base URL used by the wizard UI",
    )
    public_relay_url: str | None = Field(
        default=None,
        description="Relay base URL for result links in the browser (defaults to relay_url)",
    )
    gradio_server_name: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the storage directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (ADSTUDIO_* prefix) and .env file.
config = AdStudioConfig()
