"""
Runtime configuration for AI Image Studio.

Configuration is read once at process start from environment variables,
optionally seeded from a `.env` file via python-dotenv. Nothing is written
back; every run starts from the environment.

Classes:
    ServiceConfig: Immutable settings for the text-to-image service handle
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from AIS_Libs.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_MIME_TYPE,
    ENV_API_BASE_URL,
    ENV_API_KEY,
    ENV_API_KEY_FALLBACK,
    ENV_IMAGE_MODEL,
    ENV_LOG_LEVEL,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceConfig:
    """Settings for the remote image-generation service.

    Attributes:
        api_key: Credential sent with every request (empty when not configured)
        model: Model identifier used in the request path
        base_url: API root, without a trailing slash
        output_mime_type: Encoding requested from the service
        log_level: Name of the root logging level used by the launcher
    """
    api_key: str = ""
    model: str = DEFAULT_IMAGE_MODEL
    base_url: str = DEFAULT_API_BASE_URL
    output_mime_type: str = DEFAULT_OUTPUT_MIME_TYPE
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    @property
    def predict_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:predict"

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "ServiceConfig":
        """
        Build a config from the process environment.

        Args:
            env_file: Optional path to a .env file. When omitted, python-dotenv
                searches for a `.env` file starting from the working directory.
                Values already present in the environment are never overridden.

        Returns:
            A populated ServiceConfig
        """
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)
        else:
            load_dotenv()

        api_key = os.getenv(ENV_API_KEY) or os.getenv(ENV_API_KEY_FALLBACK) or ""
        config = cls(
            api_key=api_key.strip(),
            model=os.getenv(ENV_IMAGE_MODEL, DEFAULT_IMAGE_MODEL),
            base_url=os.getenv(ENV_API_BASE_URL, DEFAULT_API_BASE_URL),
            log_level=os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(),
        )

        if not config.has_api_key:
            logger.warning(
                f"{ENV_API_KEY} environment variable not set. "
                "Image generation will not work without it."
            )

        return config
