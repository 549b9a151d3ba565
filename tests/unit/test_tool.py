"""Unit tests for the generate_image tool layer."""

import pytest

from seedream_mcp.core.image_generator import ImageGenerator
from seedream_mcp.core.models import ModelVersion, V3_ASPECT_RATIOS, V4_SIZES
from seedream_mcp.core.tool import TOOL_NAME, build_tool_definition, invoke_tool


class TestBuildToolDefinition:
    """Tests for build_tool_definition."""

    def test_v3_schema(self):
        """Test the SeedDream 3.0 schema."""
        tool = build_tool_definition(ModelVersion.V3)
        properties = tool["inputSchema"]["properties"]

        assert tool["name"] == TOOL_NAME
        assert tool["inputSchema"]["required"] == ["prompt"]
        assert properties["aspect_ratio"]["enum"] == list(V3_ASPECT_RATIOS)
        assert properties["width"]["minimum"] == 512
        assert properties["width"]["maximum"] == 2048
        assert "guidance_scale" in properties
        assert "max_images" not in properties

    def test_v4_schema(self):
        """Test the SeedDream 4.0 schema."""
        properties = build_tool_definition(ModelVersion.V4)["inputSchema"]["properties"]

        assert properties["size"]["enum"] == list(V4_SIZES)
        assert properties["height"]["minimum"] == 1024
        assert properties["height"]["maximum"] == 4096
        assert properties["max_images"]["maximum"] == 15
        assert properties["image_input"]["maxItems"] == 10
        assert "guidance_scale" not in properties

    def test_static(self):
        """Test that repeated calls return equal definitions."""
        assert build_tool_definition(ModelVersion.V4) == build_tool_definition(ModelVersion.V4)


class TestInvokeTool:
    """Tests for invoke_tool."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        """Test that only generate_image is served."""
        with pytest.raises(ValueError, match="Unknown tool"):
            await invoke_tool(ImageGenerator(None), "edit_image", {})

    @pytest.mark.asyncio
    async def test_success(self, v4_backend, writing_downloader, tmp_path):
        """Test a successful invocation."""
        generator = ImageGenerator(v4_backend, downloader=writing_downloader, output_dir=tmp_path)

        response = await invoke_tool(generator, TOOL_NAME, {"prompt": "a red fox"})

        assert not response.is_error
        assert "3 total, 3 downloaded" in response.text

    @pytest.mark.asyncio
    async def test_partial_failure_still_success(self, v4_backend, writing_downloader, tmp_path):
        """Test that one failed download keeps the call successful."""
        writing_downloader.failing_urls.add("https://replicate.delivery/out/2.jpg")
        generator = ImageGenerator(v4_backend, downloader=writing_downloader, output_dir=tmp_path)

        response = await invoke_tool(generator, TOOL_NAME, {"prompt": "a red fox"})

        assert not response.is_error
        assert "3 total, 2 downloaded" in response.text
        assert "Download failed" in response.text

    @pytest.mark.asyncio
    async def test_validation_failure(self, v4_backend):
        """Test that rejected input becomes an error response."""
        generator = ImageGenerator(v4_backend)

        response = await invoke_tool(generator, TOOL_NAME, {"prompt": "x", "max_images": 16})

        assert response.is_error
        assert "InvalidMaxImages" in response.text
        assert v4_backend.calls == []

    @pytest.mark.asyncio
    async def test_missing_credential(self):
        """Test that no backend yields the configuration message."""
        response = await invoke_tool(ImageGenerator(None), TOOL_NAME, {"prompt": "x"})

        assert response.is_error
        assert "REPLICATE_API_TOKEN" in response.text

    @pytest.mark.asyncio
    async def test_empty_output(self, make_backend, writing_downloader, tmp_path):
        """Test that an empty v4 result fails the call."""
        generator = ImageGenerator(make_backend([]), downloader=writing_downloader, output_dir=tmp_path)

        response = await invoke_tool(generator, TOOL_NAME, {"prompt": "x"})

        assert response.is_error
        assert "EmptyOutput" in response.text
        writing_downloader.fetch.assert_not_called()
