"""
Export compositor for the image editor.

Flattens an EditSession onto the full-resolution source image and encodes the
result. The pipeline is fixed:

    1. Map the applied crop from displayed coordinates to native pixels
    2. Size the output canvas, swapping width/height for quarter turns
    3. Draw the cropped region with contrast, saturate, grayscale, sepia and
       invert applied, flipped and then rotated about the canvas center
    4. Apply brightness as a luminosity overlay over the drawn region
    5. Encode (JPEG, quality 90 by default)

The same session, source bytes and displayed size always produce the same
bytes. Displayed dimensions are passed in explicitly, never read from a widget.

Classes:
    ExportCompositor: Export settings bundled for the editor window

Functions:
    map_crop_region: Convert a displayed crop rectangle to a native source region
    output_canvas_size: Output raster size for a region and transform
    composite_image: Run steps 1-4 on a decoded image
    export_image: Decode, composite and encode
"""

import logging
from typing import Any, Optional

from AIS_Libs.constants import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_EXPORT_QUALITY,
    EDITED_IMAGE_STEM,
    FILTER_ORDER,
)
from AIS_Libs.errors import ContextUnavailableError
from AIS_Libs.ImageEditingLib.color_filters import (
    apply_filter_chain,
    apply_luminosity_overlay,
    overlay_lightness_for,
)
from AIS_Libs.ImageEditingLib.image_editing_ops import (
    decode_image,
    encode_image,
    export_filename,
    working_mode,
)
from AIS_Libs.ImageEditingLib.image_models import (
    CropRectangle,
    EditSession,
    GeometricTransform,
    Size,
    SourceImage,
    SourceRegion,
)
from AIS_Libs.ImageEditingLib.preview_renderer import transpose_steps
from AIS_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)

# Brightness is composited separately, after the geometric draw
CANVAS_FILTERS = tuple(name for name in FILTER_ORDER if name != "brightness")


def map_crop_region(
    crop: Optional[CropRectangle],
    native_size: Size,
    displayed_size: Size,
) -> SourceRegion:
    """
    Map a crop rectangle from displayed coordinates into source pixels.

    Args:
        crop: Applied crop in displayed coordinates, or None
        native_size: (width, height) of the decoded source image
        displayed_size: (width, height) the image was shown at when cropping

    Returns:
        The source region; the full image when there is no crop with area

    Raises:
        ValueError: If a crop is given but the displayed size is not positive
    """
    native_width, native_height = native_size
    if crop is None or not crop.has_area:
        return SourceRegion(0.0, 0.0, float(native_width), float(native_height))

    displayed_width, displayed_height = displayed_size
    if displayed_width <= 0 or displayed_height <= 0:
        raise ValueError(f"Displayed size must be positive, got {displayed_size}")

    scale_x = native_width / displayed_width
    scale_y = native_height / displayed_height
    return SourceRegion(
        x=crop.x * scale_x,
        y=crop.y * scale_y,
        width=crop.width * scale_x,
        height=crop.height * scale_y,
    )


def output_canvas_size(region: SourceRegion, transform: GeometricTransform, bounds: Size) -> Size:
    """
    Pixel size of the output raster.

    Args:
        region: Source region to draw
        transform: Geometry of the edit; only its rotation affects the size
        bounds: Native (width, height) the region is clamped to

    Returns:
        (width, height), swapped when the rotation is a quarter or three-quarter turn
    """
    left, top, right, bottom = region.pixel_box(bounds)
    width, height = right - left, bottom - top
    if transform.swaps_dimensions:
        return height, width
    return width, height


def _acquire_canvas(size: Size, mode: str) -> Any:
    width, height = size
    if width < 1 or height < 1:
        raise ContextUnavailableError(f"Cannot create a {width}x{height} drawing surface")
    try:
        return Image.new(mode, (width, height), (0, 0, 0, 0) if mode == "RGBA" else (0, 0, 0))
    except (ValueError, MemoryError) as exc:
        raise ContextUnavailableError(f"Cannot create a {width}x{height} drawing surface: {exc}") from exc


def composite_image(image: Any, session: EditSession, displayed_size: Size) -> Any:
    """
    Flatten the session's edits onto a decoded image.

    Args:
        image: Decoded full-resolution PIL Image
        session: The edits to apply
        displayed_size: Size the preview was displayed at when the crop was drawn

    Returns:
        The composited PIL Image (RGB, or RGBA when the source has alpha)

    Raises:
        ContextUnavailableError: If the output surface cannot be created
    """
    adjustments = session.adjustments
    transform = session.transform
    crop = session.crop

    mode = working_mode(image)
    if image.mode != mode:
        image = image.convert(mode)

    region = map_crop_region(crop, image.size, displayed_size)
    canvas = _acquire_canvas(output_canvas_size(region, transform, image.size), mode)

    drawn = image.crop(region.pixel_box(image.size))
    drawn = apply_filter_chain(drawn, [(name, getattr(adjustments, name)) for name in CANVAS_FILTERS])
    for step in transpose_steps(transform.rotation, transform.scale_x, transform.scale_y):
        drawn = drawn.transpose(step)

    # Centered on the canvas origin
    offset = ((canvas.width - drawn.width) // 2, (canvas.height - drawn.height) // 2)
    canvas.paste(drawn, offset)

    if adjustments.brightness != 100:
        canvas = apply_luminosity_overlay(canvas, overlay_lightness_for(adjustments.brightness))

    logger.debug(
        f"Composited {image.width}x{image.height} source into "
        f"{canvas.width}x{canvas.height} canvas (rotation={transform.rotation})"
    )
    return canvas


def export_image(
    source: SourceImage,
    session: EditSession,
    displayed_size: Size,
    image_format: str = DEFAULT_EXPORT_FORMAT,
    quality: int = DEFAULT_EXPORT_QUALITY,
) -> bytes:
    """
    Produce the final exported raster for an edit session.

    Args:
        source: The original encoded image
        session: The edits to apply
        displayed_size: Size the preview was displayed at when the crop was drawn
        image_format: Output format name
        quality: Lossy encoder quality (1-100)

    Returns:
        Encoded image bytes, ready to persist

    Raises:
        ImageLoadError: If the source bytes cannot be decoded
        ContextUnavailableError: If the output surface cannot be created
    """
    image = decode_image(source.data)
    canvas = composite_image(image, session, displayed_size)
    payload = encode_image(canvas, image_format, quality)
    logger.info(f"Exported {canvas.width}x{canvas.height} {image_format} ({len(payload)} bytes)")
    return payload


class ExportCompositor:
    """Export settings plus the export entry point used by the editor window."""

    def __init__(
        self,
        image_format: str = DEFAULT_EXPORT_FORMAT,
        quality: int = DEFAULT_EXPORT_QUALITY,
    ) -> None:
        self.image_format = image_format
        self.quality = quality

    @property
    def filename(self) -> str:
        return export_filename(EDITED_IMAGE_STEM, self.image_format)

    def export(self, source: SourceImage, session: EditSession, displayed_size: Size) -> bytes:
        return export_image(source, session, displayed_size, self.image_format, self.quality)
