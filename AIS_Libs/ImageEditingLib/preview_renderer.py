"""
Live preview styling for the image editor.

`render` maps the current adjustments and geometry to a StyleDescriptor. It is
pure and cheap, and is recomputed on every edit. `apply_style` draws a
descriptor onto a (thumbnail) Pillow image for display.

Functions:
    render: Build the StyleDescriptor for a set of edits
    apply_style: Render a StyleDescriptor onto a PIL Image
    fit_within: Letterbox-fit a size inside display bounds
    transpose_steps: Pillow transpose operations equivalent to a flip + rotation
"""

from typing import Any, List

from AIS_Libs.ImageEditingLib.color_filters import apply_filter_chain
from AIS_Libs.ImageEditingLib.image_models import (
    ColorAdjustments,
    GeometricTransform,
    Size,
    StyleDescriptor,
)
from AIS_Libs.pillow_compat import Image

# Pillow rotates counter-clockwise, the editor rotates clockwise
_CLOCKWISE_ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def render(adjustments: ColorAdjustments, transform: GeometricTransform) -> StyleDescriptor:
    """
    Build the preview style for the given edits.

    The filter chain always lists all six functions in their fixed order;
    the transform chain is rotate then scale.
    """
    return StyleDescriptor(
        filters=tuple(adjustments.to_dict().items()),
        rotation=transform.rotation,
        scale=(transform.scale_x, transform.scale_y),
    )


def transpose_steps(rotation: int, scale_x: int, scale_y: int) -> List[Any]:
    """
    Return the Pillow transpose operations for a flip followed by a rotation.

    A `rotate(r) scale(sx, sy)` chain scales the image in its own frame before
    rotating it, so flips come first.
    """
    steps = []
    if scale_x < 0:
        steps.append(Image.Transpose.FLIP_LEFT_RIGHT)
    if scale_y < 0:
        steps.append(Image.Transpose.FLIP_TOP_BOTTOM)
    if rotation % 360 in _CLOCKWISE_ROTATIONS:
        steps.append(_CLOCKWISE_ROTATIONS[rotation % 360])
    return steps


def apply_style(image: Any, style: StyleDescriptor) -> Any:
    """
    Render a StyleDescriptor onto an image.

    Args:
        image: PIL Image, usually a preview-sized thumbnail
        style: Descriptor produced by `render`

    Returns:
        A new PIL Image with the color chain and geometry applied
    """
    styled = apply_filter_chain(image, style.filters)
    for step in transpose_steps(style.rotation, *style.scale):
        styled = styled.transpose(step)
    return styled


def fit_within(size: Size, bounds: Size) -> Size:
    """
    Scale `size` to fit inside `bounds`, keeping its aspect ratio.

    Mirrors how a contained image is displayed: it is scaled up or down until
    one dimension touches the bounds.
    """
    width, height = size
    max_width, max_height = bounds
    if width <= 0 or height <= 0 or max_width <= 0 or max_height <= 0:
        return 0, 0

    ratio = min(max_width / width, max_height / height)
    return max(1, int(round(width * ratio))), max(1, int(round(height * ratio)))
