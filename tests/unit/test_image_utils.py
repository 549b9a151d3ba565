"""Unit tests for image utilities."""

import re
from datetime import datetime
from PIL import Image

from seedream_mcp.core.models import ModelVersion
from seedream_mcp.utils.image_utils import (
    build_image_filename,
    format_timestamp,
    get_image_info,
    safe_prompt,
)

STAMP = datetime(2025, 9, 10, 12, 30, 45, 123000)


class TestSafePrompt:
    """Tests for safe_prompt."""

    def test_basic(self):
        """Test lowercasing and underscores."""
        assert safe_prompt("A Red  Fox") == "a_red_fox"

    def test_strips_special_characters(self):
        """Test that punctuation and non-ASCII characters are dropped."""
        assert safe_prompt("Cat! @home, 猫") == "cat_home_"

    def test_truncates(self):
        """Test the length limit."""
        assert len(safe_prompt("x" * 200)) == 50


class TestBuildImageFilename:
    """Tests for build_image_filename."""

    def test_timestamp_format(self):
        """Test that the timestamp has no ':' or '.'."""
        assert format_timestamp(STAMP) == "2025-09-10T12-30-45-123"

    def test_v3_with_seed(self):
        """Test SeedDream 3.0 names."""
        name = build_image_filename("A red fox", 0, ModelVersion.V3, timestamp=STAMP, seed=42)
        assert name == "seedream_a_red_fox_42_0_2025-09-10T12-30-45-123.png"

    def test_v3_random_seed(self):
        """Test that a seed component is still present without a seed."""
        name = build_image_filename("fox", 1, ModelVersion.V3, timestamp=STAMP)
        assert re.fullmatch(r"seedream_fox_\d+_1_2025-09-10T12-30-45-123\.png", name)

    def test_v4(self):
        """Test SeedDream 4.0 names."""
        name = build_image_filename("A red fox", 2, ModelVersion.V4, timestamp=STAMP)
        assert name == "seedream4_a_red_fox_2_2025-09-10T12-30-45-123.jpg"

    def test_indexes_distinguish_files(self):
        """Test that images from one call get distinct names."""
        names = {build_image_filename("fox", i, ModelVersion.V4, timestamp=STAMP) for i in range(3)}
        assert len(names) == 3


class TestGetImageInfo:
    """Tests for get_image_info."""

    def test_png(self, tmp_path):
        """Test reading dimensions from a saved PNG."""
        path = tmp_path / "a.png"
        Image.new('RGB', (64, 32), color='red').save(path, format='PNG')

        info = get_image_info(path)

        assert info["width"] == 64
        assert info["height"] == 32
        assert info["format"] == "PNG"

    def test_not_an_image(self, tmp_path):
        """Test that unreadable files yield None."""
        path = tmp_path / "a.png"
        path.write_bytes(b"not an image")

        assert get_image_info(path) is None

    def test_missing_file(self, tmp_path):
        """Test a path that does not exist."""
        assert get_image_info(tmp_path / "missing.png") is None
