"""Human-readable text for tool results."""

from pathlib import Path
from typing import List

from seedream_mcp.core.errors import ConfigurationError, SeedreamError, UpstreamError, hint
from seedream_mcp.core.models import CUSTOM, GeneratedAsset, GenerationResult, ModelVersion

TROUBLESHOOTING = (
    "Verify your REPLICATE_API_TOKEN is set and valid",
    "Check your internet connection",
    "Ensure your Replicate account has sufficient credits",
    "Verify input parameters are within valid ranges",
    "Try a simpler prompt if the error persists",
)


def _details(result: GenerationResult) -> List[str]:
    payload = result.payload
    lines = [f"- Prompt: \"{result.prompt}\""]

    if result.model_version is ModelVersion.V3:
        lines.append(f"- Aspect Ratio: {payload['aspect_ratio']}")
        if payload["aspect_ratio"] == CUSTOM:
            lines.append(f"- Dimensions: {payload['width']}x{payload['height']}")
        else:
            lines.append(f"- Size: {payload['size']}")
        lines.append(f"- Guidance Scale: {payload['guidance_scale']}")
        lines.append(f"- Seed: {payload['seed']}" if "seed" in payload else "- Seed: Random")
    else:
        size = payload["size"]
        if size == CUSTOM:
            size = f"{size} ({payload['width']}x{payload['height']})"
        lines.append(f"- Size: {size}")
        lines.append(f"- Aspect Ratio: {payload['aspect_ratio']}")
        lines.append(f"- Max Images: {payload['max_images']}")
        lines.append(f"- Sequential Generation: {payload['sequential_image_generation']}")
        lines.append(f"- Input Images: {len(payload['image_input'])}")

    lines.append(f"- Generation Time: {result.duration_ms}ms")
    return lines


def _asset_line(asset: GeneratedAsset) -> str:
    label = f"- Image {asset.index + 1}:"
    if asset.succeeded:
        dimensions = f" ({asset.width}x{asset.height})" if asset.width and asset.height else ""
        return f"{label} {asset.local_path}{dimensions} ({asset.source_url})"
    source = f" ({asset.source_url})" if asset.source_url else ""
    return f"{label} Download failed: {asset.failure_reason}{source}"


def format_success(result: GenerationResult) -> str:
    """Summarize a successful generation, including partial download failures."""
    total = len(result.assets)
    downloaded = result.successful_downloads

    lines = [
        f"Successfully generated {total} image(s) using {result.model_version.display_name}:",
        "",
        "**Generation Details:**",
        *_details(result),
        "",
        f"**Generated Images ({total} total, {downloaded} downloaded):**",
        *(_asset_line(asset) for asset in result.assets),
        "",
    ]

    if downloaded == total:
        directory = Path(result.assets[0].local_path).parent
        lines.append(f"The image(s) have been downloaded to {directory}.")
    elif downloaded:
        lines.append(f"{total - downloaded} image(s) could not be downloaded; they are available at the URLs above.")
    else:
        lines.append("Images are available at the URLs above.")

    return "\n".join(lines)


def format_error(error: SeedreamError) -> str:
    """Render a failed invocation for the caller.

    Upstream failures get an advisory tip when one matches; a missing
    credential yields a fixed configuration message.
    """
    if isinstance(error, ConfigurationError):
        return error.message

    lines = ["**Error generating image(s):**", "", f"[{error.code.value}] {error.message}"]

    if isinstance(error, UpstreamError):
        tip = hint(error.message)
        if tip:
            lines.append(f"**Tip:** {tip}")

    lines.extend(["", "**Troubleshooting:**", *(f"- {item}" for item in TROUBLESHOOTING)])
    return "\n".join(lines)
