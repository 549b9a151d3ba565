"""Error taxonomy and advisory hints for SeedDream generation."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Failure kinds surfaced to tool callers."""

    # Caller input, rejected before any remote call
    MISSING_PROMPT = "MissingPrompt"
    INVALID_ASPECT_RATIO = "InvalidAspectRatio"
    INVALID_SIZE = "InvalidSize"
    INVALID_SEQUENTIAL_MODE = "InvalidSequentialMode"
    INVALID_MAX_IMAGES = "InvalidMaxImages"
    TOO_MANY_INPUT_IMAGES = "TooManyInputImages"
    INVALID_IMAGE_INPUT = "InvalidImageInput"
    INVALID_DIMENSIONS = "InvalidDimensions"
    INVALID_GUIDANCE_SCALE = "InvalidGuidanceScale"
    INVALID_SEED = "InvalidSeed"

    # Process configuration
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_CONFIGURATION = "InvalidConfiguration"

    # Remote call
    UPSTREAM_FAILED = "UpstreamFailed"
    TIMEOUT = "Timeout"
    EMPTY_OUTPUT = "EmptyOutput"
    MALFORMED_OUTPUT = "MalformedOutput"

    # Per-image, never fatal
    DOWNLOAD_FAILED = "DownloadFailed"


class SeedreamError(Exception):
    """Base class for all errors raised while serving a generation request.

    Attributes:
        code: Failure kind
        message: Human readable description
    """

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value!r}, message={self.message!r})"


class ValidationError(SeedreamError):
    """Bad caller input. Never reaches the upstream service."""


class ConfigurationError(SeedreamError):
    """Missing or malformed process configuration."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.MISSING_CREDENTIAL):
        super().__init__(code, message)


class UpstreamError(SeedreamError):
    """The remote call failed, timed out, or returned unusable output."""


class DownloadError(SeedreamError):
    """A single generated image could not be saved locally."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.DOWNLOAD_FAILED, message)


_TIMEOUT_TIP = "Try a simpler prompt or increase the REQUEST_TIMEOUT setting."
_AUTH_TIP = "Check your REPLICATE_API_TOKEN is valid and has sufficient credits."
_RATE_LIMIT_TIP = "You've hit the rate limit. Please wait a moment before trying again."
_INPUT_TIP = "Check your input parameters are within valid ranges."


def hint(error_message: str) -> Optional[str]:
    """Return a troubleshooting tip for an upstream failure message.

    Matching is by substring and purely advisory; it never changes how
    the failure is propagated.

    Args:
        error_message: Text of the upstream failure

    Returns:
        A user-facing tip, or None when nothing matches
    """
    text = error_message.lower()

    if "timeout" in text or "timed out" in text:
        return _TIMEOUT_TIP
    if "authentication" in text or "unauthorized" in text:
        return _AUTH_TIP
    if "rate limit" in text:
        return _RATE_LIMIT_TIP
    if "input validation" in text:
        return _INPUT_TIP
    return None
