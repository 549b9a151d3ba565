"""Core data models for SeedDream image generation."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModelVersion(str, Enum):
    """SeedDream model variants hosted on Replicate."""

    V3 = "v3"
    V4 = "v4"

    @property
    def model_id(self) -> str:
        """Replicate model identifier for this variant."""
        return MODEL_IDS[self]

    @property
    def display_name(self) -> str:
        return "SeedDream 3.0" if self is ModelVersion.V3 else "SeedDream 4.0"


MODEL_IDS = {
    ModelVersion.V3: "bytedance/seedream-3",
    ModelVersion.V4: "bytedance/seedream-4",
}

# Closed sets accepted by each variant
V3_ASPECT_RATIOS = ("1:1", "3:4", "4:3", "16:9", "9:16", "2:3", "3:2", "21:9", "custom")
V3_SIZES = ("small", "regular", "big")
V4_ASPECT_RATIOS = ("1:1", "3:4", "4:3", "16:9", "9:16", "2:3", "3:2", "21:9", "match_input_image")
V4_SIZES = ("1K", "2K", "4K", "custom")
V4_SEQUENTIAL_MODES = ("disabled", "auto")

CUSTOM = "custom"
DEFAULT_DIMENSION = 2048

V3_DIMENSION_RANGE = (512, 2048)
V4_DIMENSION_RANGE = (1024, 4096)
GUIDANCE_SCALE_RANGE = (1.0, 10.0)
SEED_RANGE = (0, 2147483647)
MAX_IMAGES_RANGE = (1, 15)
MAX_INPUT_IMAGES = 10


class V3Request(BaseModel):
    """A validated SeedDream 3.0 request with defaults applied.

    Attributes:
        prompt: Text prompt, English or Chinese
        aspect_ratio: Named ratio, or "custom" to use width/height
        size: Named size, ignored when aspect_ratio is "custom"
        width: Pixel width, only used when aspect_ratio is "custom"
        height: Pixel height, only used when aspect_ratio is "custom"
        guidance_scale: Prompt adherence
        seed: Optional seed, None lets the upstream pick one
    """

    prompt: str = Field(..., min_length=1, description="Text prompt describing the desired image")
    aspect_ratio: str = Field(default="16:9", description="Image aspect ratio")
    size: str = Field(default="regular", description="Named output size")
    width: int = Field(default=DEFAULT_DIMENSION, description="Custom width in pixels")
    height: int = Field(default=DEFAULT_DIMENSION, description="Custom height in pixels")
    guidance_scale: float = Field(default=2.5, description="How closely to follow the prompt")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducibility")

    def to_payload(self) -> Dict[str, Any]:
        """Build the upstream input, keeping custom dimensions and named size exclusive."""
        payload: Dict[str, Any] = {
            "prompt": self.prompt,
            "aspect_ratio": self.aspect_ratio,
            "guidance_scale": self.guidance_scale,
        }

        if self.aspect_ratio == CUSTOM:
            payload["width"] = self.width
            payload["height"] = self.height
        else:
            payload["size"] = self.size

        if self.seed is not None:
            payload["seed"] = self.seed

        return payload


class V4Request(BaseModel):
    """A validated SeedDream 4.0 request with defaults applied.

    Attributes:
        prompt: Text prompt, English or Chinese
        size: Resolution preset, or "custom" to use width/height
        width: Pixel width, only used when size is "custom"
        height: Pixel height, only used when size is "custom"
        max_images: Upper bound on images produced in sequential mode
        image_input: Reference image URLs for image-to-image generation
        aspect_ratio: Named ratio or "match_input_image"
        sequential_image_generation: "disabled" or "auto"
    """

    prompt: str = Field(..., min_length=1, description="Text prompt describing the desired image")
    size: str = Field(default="2K", description="Resolution preset")
    width: int = Field(default=DEFAULT_DIMENSION, description="Custom width in pixels")
    height: int = Field(default=DEFAULT_DIMENSION, description="Custom height in pixels")
    max_images: int = Field(default=1, description="Maximum number of images to generate")
    image_input: List[str] = Field(default_factory=list, description="Input image URLs")
    aspect_ratio: str = Field(default="match_input_image", description="Image aspect ratio")
    sequential_image_generation: str = Field(default="disabled", description="Group generation mode")

    def to_payload(self) -> Dict[str, Any]:
        """Build the upstream input; width/height only travel with the custom size."""
        payload: Dict[str, Any] = {
            "prompt": self.prompt,
            "size": self.size,
            "max_images": self.max_images,
            "image_input": list(self.image_input),
            "aspect_ratio": self.aspect_ratio,
            "sequential_image_generation": self.sequential_image_generation,
        }

        if self.size == CUSTOM:
            payload["width"] = self.width
            payload["height"] = self.height

        return payload


class GeneratedAsset(BaseModel):
    """Outcome for a single image produced by the upstream call.

    Exactly one of local_path and failure_reason is set.
    """

    index: int = Field(..., ge=0, description="Position in the upstream output")
    source_url: str = Field(..., description="URL the image was served from")
    local_path: Optional[str] = Field(default=None, description="Where the image was saved")
    failure_reason: Optional[str] = Field(default=None, description="Why the download failed")
    width: Optional[int] = Field(default=None, description="Pixel width of the saved file")
    height: Optional[int] = Field(default=None, description="Pixel height of the saved file")

    @model_validator(mode="after")
    def validate_outcome(self):
        """Ensure the asset is either saved or carries a failure note."""
        if (self.local_path is None) == (self.failure_reason is None):
            raise ValueError("exactly one of local_path and failure_reason must be set")
        return self

    @property
    def succeeded(self) -> bool:
        return self.local_path is not None


class GenerationResult(BaseModel):
    """Everything produced by one successful tool invocation."""

    model_config = ConfigDict(protected_namespaces=())

    model_version: ModelVersion = Field(..., description="Variant that served the request")
    prompt: str = Field(..., description="The prompt used to generate the images")
    payload: Dict[str, Any] = Field(..., description="Normalized input sent upstream")
    assets: List[GeneratedAsset] = Field(..., min_length=1, description="One entry per produced image")
    duration_ms: int = Field(..., ge=0, description="Upstream wall-clock time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.now, description="When generation finished")

    @property
    def successful_downloads(self) -> int:
        return sum(1 for asset in self.assets if asset.succeeded)

    @property
    def failed_downloads(self) -> int:
        return len(self.assets) - self.successful_downloads
