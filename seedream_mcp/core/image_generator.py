"""Image generation orchestrator: normalize, call upstream, save results."""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from seedream_mcp.backends.replicate import resolve_image_reference
from seedream_mcp.core.base_backend import BaseBackend
from seedream_mcp.core.errors import ConfigurationError, DownloadError, ErrorCode, UpstreamError
from seedream_mcp.core.models import GeneratedAsset, GenerationResult, ModelVersion
from seedream_mcp.core.normalizer import normalize
from seedream_mcp.utils.downloader import AssetDownloader
from seedream_mcp.utils.image_utils import build_image_filename, get_image_info

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_MESSAGE = (
    "Error: REPLICATE_API_TOKEN environment variable is not set. "
    "Please configure your Replicate API token."
)


class ImageGenerator:
    """Serves one generate_image invocation at a time.

    The backend is injected and may be None when no credential was
    configured; every call then fails with a ConfigurationError instead of
    crashing the process.

    Attributes:
        backend: Upstream backend, or None when unconfigured
        version: Model variant requests are normalized for
        downloader: Collaborator that saves images to disk
        output_dir: Directory generated images are written to
        timeout_ms: Upper bound on the upstream call in milliseconds
    """

    def __init__(
        self,
        backend: Optional[BaseBackend],
        version: ModelVersion = ModelVersion.V4,
        downloader: Optional[AssetDownloader] = None,
        output_dir: Union[str, Path] = "images",
        timeout_ms: int = 300000
    ):
        """Initialize the image generator.

        Args:
            backend: Upstream backend, or None if no credential is available
            version: Model variant; must match the backend's when one is given
            downloader: Image downloader (defaults to AssetDownloader())
            output_dir: Where to save generated images
            timeout_ms: Upstream timeout in milliseconds
        """
        self.backend = backend
        self.version = ModelVersion(version)
        self.downloader = downloader or AssetDownloader()
        self.output_dir = Path(output_dir)
        self.timeout_ms = timeout_ms

        if backend is not None and backend.version is not self.version:
            raise ConfigurationError(
                f"Backend serves {backend.version.value} but generator expects {self.version.value}",
                code=ErrorCode.INVALID_CONFIGURATION
            )

        logger.info(
            f"Initialized ImageGenerator for {self.version.display_name}, "
            f"backend: {backend.name if backend else 'none'}, timeout: {timeout_ms}ms"
        )

    @property
    def is_configured(self) -> bool:
        return self.backend is not None

    async def generate(self, arguments: Optional[Mapping[str, Any]]) -> GenerationResult:
        """Generate images for one tool invocation.

        Args:
            arguments: Raw tool arguments

        Returns:
            GenerationResult with one asset per produced image

        Raises:
            ConfigurationError: If no backend is configured
            ValidationError: If the arguments are rejected
            UpstreamError: If the upstream call fails, times out, or
                returns empty or malformed output
        """
        if self.backend is None:
            raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)

        payload = normalize(arguments, self.version)
        prompt = payload["prompt"]

        logger.info(f"Generating image(s) with prompt: \"{prompt}\"")
        logger.debug(f"Generation parameters: {payload}")

        start = time.monotonic()
        output = await self._run_with_timeout(payload)
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"Image(s) generated successfully in {duration_ms}ms")

        references = self._extract_references(output)
        assets = await self._download_all(prompt, references, payload.get("seed"))

        return GenerationResult(
            model_version=self.version,
            prompt=prompt,
            payload=payload,
            assets=assets,
            duration_ms=duration_ms,
        )

    async def _run_with_timeout(self, payload: Dict[str, Any]) -> Any:
        """Race the blocking upstream call against the configured timeout.

        Each call gets its own worker thread outside the loop's default
        executor, so a call abandoned on timeout never delays later upstream
        calls or downloads. The abandoned thread is not cancelled and its
        result is discarded.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="seedream-upstream")
        try:
            return await asyncio.wait_for(
                asyncio.get_running_loop().run_in_executor(executor, self.backend.run, payload),
                timeout=self.timeout_ms / 1000
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Upstream call exceeded {self.timeout_ms}ms")
            raise UpstreamError(ErrorCode.TIMEOUT, f"Request timeout after {self.timeout_ms}ms") from e
        finally:
            executor.shutdown(wait=False)

    def _extract_references(self, output: Any) -> List[Optional[str]]:
        """Check the upstream output shape and resolve it to URLs.

        Returns:
            One entry per produced image; None marks a v4 entry that did
            not resolve to a URL
        """
        if self.version is ModelVersion.V3:
            url = resolve_image_reference(output)
            if url is None:
                raise UpstreamError(
                    ErrorCode.MALFORMED_OUTPUT,
                    f"Invalid response format from Replicate: {type(output).__name__}"
                )
            return [url]

        if output is None or (isinstance(output, (list, tuple)) and len(output) == 0):
            raise UpstreamError(
                ErrorCode.EMPTY_OUTPUT,
                "No images were generated - empty response from Replicate"
            )
        if not isinstance(output, (list, tuple)):
            raise UpstreamError(
                ErrorCode.MALFORMED_OUTPUT,
                f"Invalid response format from Replicate: expected a list, got {type(output).__name__}"
            )
        return [resolve_image_reference(reference) for reference in output]

    async def _download_all(
        self,
        prompt: str,
        references: List[Optional[str]],
        seed: Optional[int]
    ) -> List[GeneratedAsset]:
        """Download every image in order; a failure only affects its own entry."""
        logger.debug(f"Downloading {len(references)} image(s) locally...")
        timestamp = datetime.now()
        assets = []

        for index, url in enumerate(references):
            if url is None:
                logger.warning(f"Invalid image URL at index {index}")
                assets.append(GeneratedAsset(
                    index=index,
                    source_url="",
                    failure_reason="Upstream returned an invalid image reference"
                ))
                continue

            filename = build_image_filename(prompt, index, self.version, timestamp=timestamp, seed=seed)
            try:
                local_path = await asyncio.to_thread(self.downloader.fetch, url, self.output_dir, filename)
            except DownloadError as e:
                logger.warning(f"Failed to download image {index + 1}: {e.message}")
                assets.append(GeneratedAsset(index=index, source_url=url, failure_reason=e.message))
                continue

            logger.info(f"Image {index + 1} downloaded successfully: {filename}")
            info = get_image_info(local_path) or {}
            assets.append(GeneratedAsset(
                index=index,
                source_url=url,
                local_path=str(local_path),
                width=info.get("width"),
                height=info.get("height"),
            ))

        return assets
