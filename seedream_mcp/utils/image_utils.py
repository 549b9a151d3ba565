"""Image utility functions for naming and inspecting saved images."""

import random
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, Union
from PIL import Image, UnidentifiedImageError

from seedream_mcp.core.models import ModelVersion

MAX_PROMPT_CHARS = 50


def safe_prompt(prompt: str) -> str:
    """Reduce a prompt to a filename-safe slug.

    Lowercases, drops everything except ASCII letters, digits and spaces,
    collapses whitespace to underscores, and truncates.
    """
    slug = re.sub(r"[^a-z0-9\s]", "", prompt.lower())
    slug = re.sub(r"\s+", "_", slug)
    return slug[:MAX_PROMPT_CHARS]


def format_timestamp(timestamp: datetime) -> str:
    """Timestamp component used in filenames, free of ':' and '.'."""
    return timestamp.strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3]


def build_image_filename(
    prompt: str,
    index: int,
    version: ModelVersion,
    timestamp: Optional[datetime] = None,
    seed: Optional[int] = None
) -> str:
    """Generate a unique filename for a generated image.

    Args:
        prompt: Prompt the image was generated from
        index: Position of the image in the upstream output
        version: Model variant that produced the image
        timestamp: Generation time (defaults to now)
        seed: Seed used for SeedDream 3.0; a random one is used when absent

    Returns:
        Filename such as ``seedream_a_red_fox_42_0_<time>.png``
    """
    stamp = format_timestamp(timestamp or datetime.now())
    slug = safe_prompt(prompt)

    if ModelVersion(version) is ModelVersion.V3:
        if seed is None:
            seed = random.randint(0, 999999)
        return f"seedream_{slug}_{seed}_{index}_{stamp}.png"

    return f"seedream4_{slug}_{index}_{stamp}.jpg"


def get_image_info(path: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """Get basic information about a saved image.

    Args:
        path: Image file on disk

    Returns:
        Dictionary with width, height, format and mode, or None if the
        file cannot be read as an image
    """
    try:
        with Image.open(path) as image:
            return {
                "width": image.width,
                "height": image.height,
                "format": image.format,
                "mode": image.mode,
            }
    except (UnidentifiedImageError, OSError):
        return None
