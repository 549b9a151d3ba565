"""Shared test fixtures and configuration."""

import pytest
import os
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import Mock
from PIL import Image

from seedream_mcp.core.base_backend import BaseBackend
from seedream_mcp.core.errors import DownloadError
from seedream_mcp.core.models import ModelVersion
from seedream_mcp.utils.downloader import AssetDownloader


class FakeBackend(BaseBackend):
    """In-memory backend that records payloads and returns a canned output."""

    def __init__(self, output: Any = None, version: ModelVersion = ModelVersion.V4, error: Exception = None):
        super().__init__("r8_test_token", version)
        self.output = output
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def run(self, payload: Dict[str, Any]) -> Any:
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        return self.output

    @property
    def name(self) -> str:
        return "Fake"


@pytest.fixture
def sample_prompt():
    """Return a sample prompt for testing."""
    return "A red fox in the snow"


@pytest.fixture
def sample_image_bytes():
    """Return a small PNG as bytes."""
    import io
    img_byte_arr = io.BytesIO()
    Image.new('RGB', (64, 32), color='red').save(img_byte_arr, format='PNG')
    return img_byte_arr.getvalue()


@pytest.fixture
def v3_backend():
    """Return a SeedDream 3.0 fake backend producing one URL."""
    return FakeBackend("https://replicate.delivery/out/image.png", version=ModelVersion.V3)


@pytest.fixture
def v4_backend():
    """Return a SeedDream 4.0 fake backend producing three URLs."""
    return FakeBackend(
        [
            "https://replicate.delivery/out/0.jpg",
            "https://replicate.delivery/out/1.jpg",
            "https://replicate.delivery/out/2.jpg",
        ],
        version=ModelVersion.V4,
    )


@pytest.fixture
def writing_downloader(sample_image_bytes):
    """Return a downloader mock that writes sample bytes and can fail on chosen URLs."""
    failing_urls = set()

    def fetch(url, destination_dir, filename):
        if url in failing_urls:
            raise DownloadError("Failed to download image: HTTP 404")
        directory = Path(destination_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_bytes(sample_image_bytes)
        return path

    downloader = Mock(spec=AssetDownloader)
    downloader.fetch.side_effect = fetch
    downloader.failing_urls = failing_urls
    return downloader


# Skip integration tests unless explicitly requested
def pytest_collection_modifyitems(config, items):
    """Automatically skip integration tests unless RUN_INTEGRATION_TESTS is set."""
    skip_integration = pytest.mark.skip(reason="Integration tests disabled (set RUN_INTEGRATION_TESTS=true to enable)")

    for item in items:
        if "integration" in item.keywords:
            if not os.getenv("RUN_INTEGRATION_TESTS", "").lower() == "true":
                item.add_marker(skip_integration)


@pytest.fixture
def make_backend():
    """Return the FakeBackend class for tests that need custom outputs."""
    return FakeBackend
