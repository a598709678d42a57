"""
Exception taxonomy for AI Image Studio.

Classes:
    StudioError: Base class for every error raised by AIS_Libs
    ValidationError: A generation request was rejected before contacting the service
    GenerationError: The remote text-to-image call failed or returned nothing usable
    ImageLoadError: Source image bytes could not be decoded for export
    ContextUnavailableError: The export drawing surface could not be created
"""


class StudioError(Exception):
    """Base class for AI Image Studio errors."""


class ValidationError(StudioError, ValueError):
    """Raised for a blank prompt or an unsupported aspect ratio."""


class GenerationError(StudioError, RuntimeError):
    """Raised when image generation fails for any transport or service reason."""


class ImageLoadError(StudioError, OSError):
    """Raised when the source image cannot be decoded into a drawable form."""


class ContextUnavailableError(StudioError, RuntimeError):
    """Raised when the off-screen raster buffer cannot be acquired."""
