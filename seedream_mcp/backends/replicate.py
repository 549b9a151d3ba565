"""Replicate API backend for the SeedDream models."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import replicate
from replicate.exceptions import ReplicateError

from seedream_mcp.core.base_backend import BaseBackend
from seedream_mcp.core.errors import ConfigurationError, ErrorCode, UpstreamError
from seedream_mcp.core.models import ModelVersion

logger = logging.getLogger(__name__)


def resolve_image_reference(reference: Any) -> Optional[str]:
    """Turn an upstream image reference into an absolute http(s) URL.

    Replicate returns either plain URL strings or file output objects that
    expose the URL through a ``url`` attribute.

    Args:
        reference: One element of the model output

    Returns:
        The URL, or None if the reference is not a well-formed http(s) URL
    """
    if reference is None:
        return None

    url = getattr(reference, "url", reference)
    if callable(url):
        url = url()
    if not isinstance(url, str):
        return None

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return url


class ReplicateBackend(BaseBackend):
    """Backend implementation using the Replicate API.

    Attributes:
        api_key: Replicate API token
        version: SeedDream variant to run
        client: Replicate client instance
    """

    def __init__(self, api_key: str, version: ModelVersion = ModelVersion.V4):
        """Initialize the Replicate backend.

        Args:
            api_key: Replicate API token
            version: SeedDream variant (defaults to 4.0)

        Raises:
            ConfigurationError: If API key is empty
        """
        super().__init__(api_key, version)

        if not api_key:
            raise ConfigurationError("Replicate API key is required")

        if not api_key.startswith("r8_"):
            logger.warning("API token format may be invalid - should start with 'r8_'")

        self.client = replicate.Client(api_token=api_key)
        logger.info(f"Initialized Replicate backend with model: {self.model_id}")

    def run(self, payload: Dict[str, Any]) -> Any:
        """Run the SeedDream model on Replicate.

        Args:
            payload: Normalized model input

        Returns:
            Raw model output, not yet checked for shape

        Raises:
            UpstreamError: If the Replicate call fails for any reason
        """
        try:
            logger.debug(f"Calling Replicate API with params: {list(payload.keys())}")
            return self.client.run(self.model_id, input=payload)

        except ReplicateError as e:
            logger.error(f"Replicate API error: {e}")
            raise UpstreamError(ErrorCode.UPSTREAM_FAILED, f"Replicate API error: {e}") from e

        except Exception as e:
            logger.error(f"Unexpected error calling Replicate: {e}")
            raise UpstreamError(ErrorCode.UPSTREAM_FAILED, f"Failed to call Replicate: {e}") from e

    @property
    def name(self) -> str:
        """Get the backend name.

        Returns:
            The string "Replicate"
        """
        return "Replicate"
