"""Validation and normalization of loosely-typed generation requests."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from seedream_mcp.core.errors import ErrorCode, ValidationError
from seedream_mcp.core.models import (
    CUSTOM,
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
    V3Request,
    V4Request,
)

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class RequestNormalizer(ABC):
    """Turns an untrusted argument mapping into an upstream payload.

    Checks run in a fixed order and the first failure wins. Defaults are
    applied only once every check has passed, so a rejected request never
    produces a payload.
    """

    version: ModelVersion
    aspect_ratios: Tuple[str, ...]
    sizes: Tuple[str, ...]
    dimension_range: Tuple[int, int]

    def normalize(self, raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Validate raw tool arguments and return the canonical payload.

        Args:
            raw: Tool arguments as received from the caller

        Returns:
            The payload to send to the upstream model

        Raises:
            ValidationError: If any argument is missing or out of range
        """
        params = self._present(raw)
        self._check_prompt(params)
        self._check_choice(params, "aspect_ratio", self.aspect_ratios, ErrorCode.INVALID_ASPECT_RATIO)
        self._check_choice(params, "size", self.sizes, ErrorCode.INVALID_SIZE)
        self._check_version_fields(params)
        if self._uses_custom_dimensions(params):
            self._check_dimensions(params)
        self._check_tuning_fields(params)

        payload = self._build(params).to_payload()
        logger.debug(f"Normalized {self.version.value} payload: {payload}")
        return payload

    @staticmethod
    def _present(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Keep only the arguments the caller actually supplied."""
        if not isinstance(raw, Mapping):
            return {}
        return {key: value for key, value in raw.items() if value is not None}

    @staticmethod
    def _check_prompt(params: Dict[str, Any]) -> None:
        prompt = params.get("prompt")
        if not isinstance(prompt, str) or not prompt:
            raise ValidationError(
                ErrorCode.MISSING_PROMPT,
                "Prompt is required and must be a non-empty string"
            )

    @staticmethod
    def _check_choice(
        params: Dict[str, Any],
        field: str,
        choices: Sequence[str],
        code: ErrorCode
    ) -> None:
        if field in params and params[field] not in choices:
            label = field.replace("_", " ")
            raise ValidationError(
                code,
                f"Invalid {label} '{params[field]}'. Must be one of: {', '.join(choices)}"
            )

    def _check_dimensions(self, params: Dict[str, Any]) -> None:
        low, high = self.dimension_range
        for field in ("width", "height"):
            if field not in params:
                continue
            value = params[field]
            if not _is_int(value) or not low <= value <= high:
                raise ValidationError(
                    ErrorCode.INVALID_DIMENSIONS,
                    f"{field} must be an integer between {low} and {high} when using custom sizing, "
                    f"got {value!r}"
                )

    def _check_version_fields(self, params: Dict[str, Any]) -> None:
        """Checks for fields only one variant understands."""

    def _check_tuning_fields(self, params: Dict[str, Any]) -> None:
        """Range checks for optional numeric tuning fields."""

    @abstractmethod
    def _uses_custom_dimensions(self, params: Dict[str, Any]) -> bool:
        """Whether the request selects explicit pixel dimensions."""

    @abstractmethod
    def _build(self, params: Dict[str, Any]):
        """Construct the typed request with defaults applied."""


class V3Normalizer(RequestNormalizer):
    """SeedDream 3.0: "custom" lives on aspect_ratio."""

    version = ModelVersion.V3
    aspect_ratios = V3_ASPECT_RATIOS
    sizes = V3_SIZES
    dimension_range = V3_DIMENSION_RANGE

    def _uses_custom_dimensions(self, params: Dict[str, Any]) -> bool:
        return params.get("aspect_ratio") == CUSTOM

    def _check_tuning_fields(self, params: Dict[str, Any]) -> None:
        if "guidance_scale" in params:
            low, high = GUIDANCE_SCALE_RANGE
            value = params["guidance_scale"]
            if not _is_number(value) or not low <= value <= high:
                raise ValidationError(
                    ErrorCode.INVALID_GUIDANCE_SCALE,
                    f"guidance_scale must be a number between {low} and {high}, got {value!r}"
                )

        if "seed" in params:
            low, high = SEED_RANGE
            value = params["seed"]
            if not _is_int(value) or not low <= value <= high:
                raise ValidationError(
                    ErrorCode.INVALID_SEED,
                    f"seed must be an integer between {low} and {high}, got {value!r}"
                )

    def _build(self, params: Dict[str, Any]) -> V3Request:
        fields = ("prompt", "aspect_ratio", "size", "guidance_scale", "seed")
        values = {field: params[field] for field in fields if field in params}
        if self._uses_custom_dimensions(params):
            values.update({field: params[field] for field in ("width", "height") if field in params})
        return V3Request(**values)


class V4Normalizer(RequestNormalizer):
    """SeedDream 4.0: "custom" lives on size."""

    version = ModelVersion.V4
    aspect_ratios = V4_ASPECT_RATIOS
    sizes = V4_SIZES
    dimension_range = V4_DIMENSION_RANGE

    def _uses_custom_dimensions(self, params: Dict[str, Any]) -> bool:
        return params.get("size") == CUSTOM

    def _check_version_fields(self, params: Dict[str, Any]) -> None:
        self._check_choice(
            params,
            "sequential_image_generation",
            V4_SEQUENTIAL_MODES,
            ErrorCode.INVALID_SEQUENTIAL_MODE
        )

        if "max_images" in params:
            low, high = MAX_IMAGES_RANGE
            value = params["max_images"]
            if not _is_int(value) or not low <= value <= high:
                raise ValidationError(
                    ErrorCode.INVALID_MAX_IMAGES,
                    f"max_images must be an integer between {low} and {high}, got {value!r}"
                )

        if "image_input" in params:
            images = params["image_input"]
            if not isinstance(images, (list, tuple)):
                raise ValidationError(
                    ErrorCode.INVALID_IMAGE_INPUT,
                    "image_input must be a list of image URLs"
                )
            if len(images) > MAX_INPUT_IMAGES:
                raise ValidationError(
                    ErrorCode.TOO_MANY_INPUT_IMAGES,
                    f"image_input can contain at most {MAX_INPUT_IMAGES} images, got {len(images)}"
                )
            if not all(isinstance(url, str) and url for url in images):
                raise ValidationError(
                    ErrorCode.INVALID_IMAGE_INPUT,
                    "image_input entries must be non-empty URL strings"
                )

    def _build(self, params: Dict[str, Any]) -> V4Request:
        fields = ("prompt", "size", "max_images", "image_input", "aspect_ratio", "sequential_image_generation")
        values = {field: params[field] for field in fields if field in params}
        if self._uses_custom_dimensions(params):
            values.update({field: params[field] for field in ("width", "height") if field in params})
        return V4Request(**values)


_NORMALIZERS: Dict[ModelVersion, RequestNormalizer] = {
    ModelVersion.V3: V3Normalizer(),
    ModelVersion.V4: V4Normalizer(),
}


def get_normalizer(version: ModelVersion) -> RequestNormalizer:
    """Return the normalizer for a model variant."""
    return _NORMALIZERS[ModelVersion(version)]


def normalize(raw: Optional[Mapping[str, Any]], version: ModelVersion) -> Dict[str, Any]:
    """Validate raw tool arguments for the given variant.

    Raises:
        ValidationError: If the arguments are rejected
    """
    return get_normalizer(version).normalize(raw)
