"""
Color filter functions for AI Image Studio.

Implements the CSS Filter Effects shorthand functions (brightness, contrast,
saturate, grayscale, sepia, invert) on Pillow images using numpy, so that the
exported raster matches what the live preview shows. All math runs on sRGB
components in the 0.0-1.0 range, each function clamps its result, and the
alpha channel is never modified.

Also provides the luminosity overlay used by the export brightness pass.

Functions:
    apply_filter_chain: Apply an ordered list of (filter, percent) steps
    apply_luminosity_overlay: Blend a uniform gray overlay in luminosity mode
    overlay_lightness_for: Map a brightness percentage to an overlay lightness
"""

from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import numpy as np

from AIS_Libs.constants import IDENTITY_ADJUSTMENTS, NEUTRAL_OVERLAY_LIGHTNESS
from AIS_Libs.pillow_compat import Image

FilterFunction = Callable[[np.ndarray, float], np.ndarray]

# W3C compositing luminance weights
LUMINANCE_WEIGHTS = np.array([0.3, 0.59, 0.11], dtype=np.float32)


def _split_image(image: Any) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Return (rgb floats in 0..1, untouched alpha bytes or None)."""
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    target_mode = "RGBA" if has_alpha else "RGB"
    if image.mode != target_mode:
        image = image.convert(target_mode)

    data = np.asarray(image)
    rgb = data[..., :3].astype(np.float32) / 255.0
    alpha = data[..., 3:].copy() if has_alpha else None
    return rgb, alpha


def _merge_image(rgb: np.ndarray, alpha: Optional[np.ndarray]) -> Any:
    channels = np.clip(np.rint(rgb * 255.0), 0, 255).astype(np.uint8)
    if alpha is not None:
        channels = np.concatenate([channels, alpha], axis=-1)
    return Image.fromarray(channels)


def _apply_matrix(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return np.clip(rgb @ matrix.T, 0.0, 1.0)


def brightness(rgb: np.ndarray, amount: float) -> np.ndarray:
    return np.clip(rgb * amount, 0.0, 1.0)


def contrast(rgb: np.ndarray, amount: float) -> np.ndarray:
    return np.clip(rgb * amount + (0.5 - 0.5 * amount), 0.0, 1.0)


def saturate(rgb: np.ndarray, amount: float) -> np.ndarray:
    s = amount
    matrix = np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ], dtype=np.float32)
    return _apply_matrix(rgb, matrix)


def grayscale(rgb: np.ndarray, amount: float) -> np.ndarray:
    g = 1.0 - min(max(amount, 0.0), 1.0)
    matrix = np.array([
        [0.2126 + 0.7874 * g, 0.7152 - 0.7152 * g, 0.0722 - 0.0722 * g],
        [0.2126 - 0.2126 * g, 0.7152 + 0.2848 * g, 0.0722 - 0.0722 * g],
        [0.2126 - 0.2126 * g, 0.7152 - 0.7152 * g, 0.0722 + 0.9278 * g],
    ], dtype=np.float32)
    return _apply_matrix(rgb, matrix)


def sepia(rgb: np.ndarray, amount: float) -> np.ndarray:
    g = 1.0 - min(max(amount, 0.0), 1.0)
    matrix = np.array([
        [0.393 + 0.607 * g, 0.769 - 0.769 * g, 0.189 - 0.189 * g],
        [0.349 - 0.349 * g, 0.686 + 0.314 * g, 0.168 - 0.168 * g],
        [0.272 - 0.272 * g, 0.534 - 0.534 * g, 0.131 + 0.869 * g],
    ], dtype=np.float32)
    return _apply_matrix(rgb, matrix)


def invert(rgb: np.ndarray, amount: float) -> np.ndarray:
    a = min(max(amount, 0.0), 1.0)
    return np.clip(a + rgb * (1.0 - 2.0 * a), 0.0, 1.0)


FILTER_FUNCTIONS: Dict[str, FilterFunction] = {
    "brightness": brightness,
    "contrast": contrast,
    "saturate": saturate,
    "grayscale": grayscale,
    "sepia": sepia,
    "invert": invert,
}


def apply_filter_chain(image: Any, steps: Iterable[Tuple[str, float]]) -> Any:
    """
    Apply color filters to an image in the given order.

    Steps whose percentage equals the filter's identity value are skipped, so
    an all-identity chain returns a pixel-identical copy.

    Args:
        image: PIL Image to process
        steps: (filter name, percent) pairs, e.g. [("contrast", 150)]

    Returns:
        A new PIL Image

    Raises:
        KeyError: If a filter name is unknown
    """
    active = []
    for name, percent in steps:
        if name not in FILTER_FUNCTIONS:
            raise KeyError(f"Unknown color filter: {name}")
        if percent != IDENTITY_ADJUSTMENTS[name]:
            active.append((FILTER_FUNCTIONS[name], percent / 100.0))

    if not active:
        return image.copy()

    rgb, alpha = _split_image(image)
    for function, amount in active:
        rgb = function(rgb, amount)
    return _merge_image(rgb, alpha)


def _luminance(rgb: np.ndarray) -> np.ndarray:
    return rgb @ LUMINANCE_WEIGHTS


def _safe_divisor(values: np.ndarray) -> np.ndarray:
    return np.where(values == 0, 1.0, values)


def _clip_color(rgb: np.ndarray) -> np.ndarray:
    lum = _luminance(rgb)[..., None]
    low = rgb.min(axis=-1, keepdims=True)
    high = rgb.max(axis=-1, keepdims=True)

    lifted = lum + (rgb - lum) * lum / _safe_divisor(lum - low)
    rgb = np.where(low < 0.0, lifted, rgb)

    lowered = lum + (rgb - lum) * (1.0 - lum) / _safe_divisor(high - lum)
    rgb = np.where(high > 1.0, lowered, rgb)
    return rgb


def _set_luminance(rgb: np.ndarray, target: np.ndarray) -> np.ndarray:
    delta = target - _luminance(rgb)
    return _clip_color(rgb + delta[..., None])


def overlay_lightness_for(brightness_percent: float) -> float:
    """Lightness (0.0-1.0+) of the gray overlay for a brightness percentage."""
    return brightness_percent / 100.0 * NEUTRAL_OVERLAY_LIGHTNESS


def apply_luminosity_overlay(image: Any, lightness: float) -> Any:
    """
    Blend a uniform gray overlay onto an image in luminosity mode.

    The overlay's lightness relative to neutral gray (0.5) scales each pixel's
    luminance; hue and saturation are kept by re-applying the scaled luminance
    with the W3C SetLum/ClipColor operators. A neutral overlay is a no-op.

    Args:
        image: PIL Image to process
        lightness: Overlay lightness, where 0.5 leaves the image unchanged

    Returns:
        A new PIL Image
    """
    if lightness == NEUTRAL_OVERLAY_LIGHTNESS:
        return image.copy()

    factor = max(lightness, 0.0) / NEUTRAL_OVERLAY_LIGHTNESS
    rgb, alpha = _split_image(image)
    target = np.clip(_luminance(rgb) * factor, 0.0, 1.0)
    return _merge_image(_set_luminance(rgb, target), alpha)
