"""
Image editing data models for AI Image Studio.

This module defines the data structures describing a pending, non-destructive
edit of a generated image. None of these types carry editing behavior; the
edits are metadata layered on top of the untouched source bytes until export.

Classes:
    ColorAdjustments: The six color filter percentages
    GeometricTransform: Quarter-turn rotation plus horizontal/vertical flips
    CropRectangle: A rectangle in displayed (preview) coordinates
    SourceRegion: A float rectangle in native source-pixel coordinates
    EditSession: The aggregate of all pending edits for one editor invocation
    SourceImage: The immutable encoded original
    StyleDescriptor: Ordered filter and transform chains for the live preview

Type Aliases:
    Size: A (width, height) tuple
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from AIS_Libs.constants import (
    DEFAULT_OUTPUT_MIME_TYPE,
    FILTER_ORDER,
    FULL_TURN,
    MIME_EXTENSIONS,
    ROTATION_STEP,
)

Size = Tuple[int, int]


@dataclass(frozen=True)
class ColorAdjustments:
    """Color filter percentages.

    Attributes:
        brightness: 0-200, 100 is unchanged
        contrast: 0-200, 100 is unchanged
        saturate: 0-200, 100 is unchanged
        grayscale: 0-100, 0 is unchanged
        sepia: 0-100, 0 is unchanged
        invert: 0-100, 0 is unchanged
    """
    brightness: int = 100
    contrast: int = 100
    saturate: int = 100
    grayscale: int = 0
    sepia: int = 0
    invert: int = 0

    def with_value(self, name: str, value: int) -> "ColorAdjustments":
        if name not in FILTER_ORDER:
            raise KeyError(f"Unknown color adjustment: {name}")
        return replace(self, **{name: value})

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in FILTER_ORDER}

    @property
    def is_identity(self) -> bool:
        return self == ColorAdjustments()


@dataclass(frozen=True)
class GeometricTransform:
    """Rotation in clockwise quarter turns plus flip factors.

    Attributes:
        rotation: Degrees, one of 0, 90, 180, 270
        scale_x: -1 when flipped horizontally, else 1
        scale_y: -1 when flipped vertically, else 1
    """
    rotation: int = 0
    scale_x: int = 1
    scale_y: int = 1

    def rotated(self) -> "GeometricTransform":
        return replace(self, rotation=(self.rotation + ROTATION_STEP) % FULL_TURN)

    def flipped_horizontal(self) -> "GeometricTransform":
        return replace(self, scale_x=-self.scale_x)

    def flipped_vertical(self) -> "GeometricTransform":
        return replace(self, scale_y=-self.scale_y)

    @property
    def swaps_dimensions(self) -> bool:
        return self.rotation % 180 != 0

    @property
    def is_identity(self) -> bool:
        return self == GeometricTransform()


@dataclass(frozen=True)
class CropRectangle:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def as_box(self) -> Tuple[float, float, float, float]:
        """Return (left, top, right, bottom)."""
        return self.x, self.y, self.right, self.bottom


@dataclass(frozen=True)
class SourceRegion:
    """Region of the source image in native pixels (may be fractional)."""
    x: float
    y: float
    width: float
    height: float

    def pixel_box(self, bounds: Size) -> Tuple[int, int, int, int]:
        """
        Round the region to whole pixels and clamp it to the image bounds.

        Args:
            bounds: (width, height) of the source image

        Returns:
            A (left, top, right, bottom) box suitable for Image.crop
        """
        max_w, max_h = bounds
        left = min(max(int(round(self.x)), 0), max_w)
        top = min(max(int(round(self.y)), 0), max_h)
        right = min(max(int(round(self.x + self.width)), left), max_w)
        bottom = min(max(int(round(self.y + self.height)), top), max_h)
        return left, top, right, bottom


@dataclass
class EditSession:
    """All pending edits for one open editor.

    A new session is created every time the editor opens; sessions are never
    reused for a different image.
    """
    adjustments: ColorAdjustments = field(default_factory=ColorAdjustments)
    transform: GeometricTransform = field(default_factory=GeometricTransform)
    crop: Optional[CropRectangle] = None
    is_cropping: bool = False

    @property
    def is_identity(self) -> bool:
        return (
            self.adjustments.is_identity
            and self.transform.is_identity
            and (self.crop is None or not self.crop.has_area)
        )


@dataclass(frozen=True)
class SourceImage:
    """The original encoded image exactly as received from the service."""
    data: bytes
    mime_type: str = DEFAULT_OUTPUT_MIME_TYPE

    @property
    def extension(self) -> str:
        return MIME_EXTENSIONS.get(self.mime_type.lower(), "jpeg")


@dataclass(frozen=True)
class StyleDescriptor:
    """Ordered style chains for the live preview.

    Attributes:
        filters: (function, percent) pairs in application order
        rotation: Clockwise degrees
        scale: (scale_x, scale_y) flip factors, applied before the rotation
    """
    filters: Tuple[Tuple[str, int], ...]
    rotation: int = 0
    scale: Tuple[int, int] = (1, 1)

    @property
    def filter_css(self) -> str:
        return " ".join(f"{name}({value}%)" for name, value in self.filters)

    @property
    def transform_css(self) -> str:
        return f"rotate({self.rotation}deg) scale({self.scale[0]}, {self.scale[1]})"
