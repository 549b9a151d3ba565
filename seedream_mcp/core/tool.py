"""The generate_image tool: static schema and invocation entry point."""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from seedream_mcp.core.errors import SeedreamError
from seedream_mcp.core.formatter import format_error, format_success
from seedream_mcp.core.image_generator import ImageGenerator
from seedream_mcp.core.models import (
    DEFAULT_DIMENSION,
    GUIDANCE_SCALE_RANGE,
    MAX_IMAGES_RANGE,
    MAX_INPUT_IMAGES,
    SEED_RANGE,
    V3_ASPECT_RATIOS,
    V3_DIMENSION_RANGE,
    V3_SIZES,
    V4_ASPECT_RATIOS,
    V4_DIMENSION_RANGE,
    V4_SEQUENTIAL_MODES,
    V4_SIZES,
    ModelVersion,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "generate_image"

_PROMPT_PROPERTY = {
    "type": "string",
    "description": (
        "The text prompt used to generate the image. Supports both English and Chinese. "
        "Be descriptive for best results."
    ),
}


class ToolResponse(BaseModel):
    """Text returned to the caller plus the error flag."""

    text: str = Field(..., description="Summary or error block")
    is_error: bool = Field(default=False, description="Whether the invocation failed")


def _dimension_property(axis: str, mode: str, bounds: tuple) -> Dict[str, Any]:
    low, high = bounds
    return {
        "type": "integer",
        "description": f"Image {axis} (only used when {mode}). Range: {low}-{high} pixels.",
        "minimum": low,
        "maximum": high,
        "default": DEFAULT_DIMENSION,
    }


def _v3_properties() -> Dict[str, Any]:
    return {
        "prompt": _PROMPT_PROPERTY,
        "aspect_ratio": {
            "type": "string",
            "enum": list(V3_ASPECT_RATIOS),
            "description": "Image aspect ratio. Set to 'custom' to specify width and height.",
            "default": "16:9",
        },
        "size": {
            "type": "string",
            "enum": list(V3_SIZES),
            "description": (
                "Big images have their longest dimension at 2048px. Small images have their "
                "shortest dimension at 512px. Regular images are 1 megapixel. "
                "Ignored if aspect ratio is custom."
            ),
            "default": "regular",
        },
        "width": _dimension_property("width", "aspect_ratio is 'custom'", V3_DIMENSION_RANGE),
        "height": _dimension_property("height", "aspect_ratio is 'custom'", V3_DIMENSION_RANGE),
        "guidance_scale": {
            "type": "number",
            "description": "Prompt adherence. Higher = more literal.",
            "minimum": GUIDANCE_SCALE_RANGE[0],
            "maximum": GUIDANCE_SCALE_RANGE[1],
            "default": 2.5,
        },
        "seed": {
            "type": "integer",
            "description": "Random seed. Use the same seed for reproducible results.",
            "minimum": SEED_RANGE[0],
            "maximum": SEED_RANGE[1],
        },
    }


def _v4_properties() -> Dict[str, Any]:
    return {
        "prompt": _PROMPT_PROPERTY,
        "size": {
            "type": "string",
            "enum": list(V4_SIZES),
            "description": "Image resolution: 1K (1024px), 2K (2048px), 4K (4096px), or 'custom'.",
            "default": "2K",
        },
        "width": _dimension_property("width", "size is 'custom'", V4_DIMENSION_RANGE),
        "height": _dimension_property("height", "size is 'custom'", V4_DIMENSION_RANGE),
        "max_images": {
            "type": "integer",
            "description": (
                "Maximum number of images to generate when sequential_image_generation is 'auto'."
            ),
            "minimum": MAX_IMAGES_RANGE[0],
            "maximum": MAX_IMAGES_RANGE[1],
            "default": 1,
        },
        "image_input": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Input image URLs for image-to-image generation.",
            "maxItems": MAX_INPUT_IMAGES,
            "default": [],
        },
        "aspect_ratio": {
            "type": "string",
            "enum": list(V4_ASPECT_RATIOS),
            "description": (
                "Image aspect ratio. Only used when size is not 'custom'. "
                "'match_input_image' follows the input image."
            ),
            "default": "match_input_image",
        },
        "sequential_image_generation": {
            "type": "string",
            "enum": list(V4_SEQUENTIAL_MODES),
            "description": (
                "'disabled' generates a single image. 'auto' lets the model decide whether "
                "to generate multiple related images."
            ),
            "default": "disabled",
        },
    }


def build_tool_definition(version: ModelVersion) -> Dict[str, Any]:
    """Describe the generate_image tool for a model variant.

    The result is static and side-effect free.
    """
    version = ModelVersion(version)
    if version is ModelVersion.V3:
        description = (
            "Generate images using Bytedance's SeedDream 3.0 model via Replicate. Supports "
            "bilingual prompts (Chinese and English), high-resolution output, and various aspect ratios."
        )
        properties = _v3_properties()
    else:
        description = (
            "Generate images using Bytedance's SeedDream 4.0 model via Replicate. Supports "
            "bilingual prompts, output up to 4K, image-to-image and sequential image generation."
        )
        properties = _v4_properties()

    return {
        "name": TOOL_NAME,
        "description": description,
        "inputSchema": {
            "type": "object",
            "properties": properties,
            "required": ["prompt"],
        },
    }


async def invoke_tool(
    generator: ImageGenerator,
    name: str,
    arguments: Optional[Mapping[str, Any]]
) -> ToolResponse:
    """Run a tool call and render its outcome.

    Every SeedreamError becomes an error response; the process keeps
    serving.

    Raises:
        ValueError: If name is not a known tool
    """
    if name != TOOL_NAME:
        raise ValueError(f"Unknown tool: {name}")

    try:
        result = await generator.generate(arguments)
    except SeedreamError as e:
        logger.error(f"Image generation failed: [{e.code.value}] {e.message}")
        return ToolResponse(text=format_error(e), is_error=True)

    if result.failed_downloads:
        logger.warning(f"{result.failed_downloads} of {len(result.assets)} image(s) failed to download")
    return ToolResponse(text=format_success(result))
