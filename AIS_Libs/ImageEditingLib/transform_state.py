"""
Transform state for the image editor.

TransformState wraps an EditSession and is the only way the editor mutates
color adjustments and geometry. Every mutation recomputes the preview style
and notifies subscribers. Crop selection lives in CropSelector and is never
touched here, apart from `reset` clearing the applied crop.

Classes:
    TransformState: Setters, presets and geometric operations over an EditSession
"""

import logging
from typing import Callable, List, Optional

from AIS_Libs.constants import ADJUSTMENT_RANGES, PRESETS
from AIS_Libs.ImageEditingLib.image_models import (
    ColorAdjustments,
    EditSession,
    GeometricTransform,
    StyleDescriptor,
)
from AIS_Libs.ImageEditingLib.preview_renderer import render

logger = logging.getLogger(__name__)

StyleListener = Callable[[StyleDescriptor], None]


def clamp_adjustment(name: str, value: float) -> int:
    """
    Clamp an adjustment percentage to its documented range.

    Raises:
        KeyError: If name is not a color adjustment
    """
    low, high = ADJUSTMENT_RANGES[name]
    return int(max(low, min(high, round(value))))


class TransformState:
    """
    Mutable view over the adjustments and geometry of an EditSession.

    Example:
        >>> state = TransformState()
        >>> state.apply_preset("sepia")
        >>> state.rotate()
        >>> state.style.transform_css
        'rotate(90deg) scale(1, 1)'
    """

    def __init__(self, session: Optional[EditSession] = None) -> None:
        self.session = session if session is not None else EditSession()
        self._listeners: List[StyleListener] = []
        self.style = render(self.session.adjustments, self.session.transform)

    @property
    def adjustments(self) -> ColorAdjustments:
        return self.session.adjustments

    @property
    def transform(self) -> GeometricTransform:
        return self.session.transform

    def subscribe(self, listener: StyleListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StyleListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Color adjustments

    def set_adjustment(self, name: str, value: float) -> None:
        """
        Replace a single color adjustment.

        Values outside the adjustment's range are clamped to it.

        Raises:
            KeyError: If name is not one of the six color adjustments
        """
        clamped = clamp_adjustment(name, value)
        self.session.adjustments = self.session.adjustments.with_value(name, clamped)
        self._changed()

    def set_brightness(self, value: float) -> None:
        self.set_adjustment("brightness", value)

    def set_contrast(self, value: float) -> None:
        self.set_adjustment("contrast", value)

    def set_saturate(self, value: float) -> None:
        self.set_adjustment("saturate", value)

    def set_grayscale(self, value: float) -> None:
        self.set_adjustment("grayscale", value)

    def set_sepia(self, value: float) -> None:
        self.set_adjustment("sepia", value)

    def set_invert(self, value: float) -> None:
        self.set_adjustment("invert", value)

    def apply_preset(self, name: str) -> None:
        """
        Replace all adjustments with the defaults overridden by a preset.

        Presets are mutually exclusive: applying one discards whatever any
        earlier preset or slider set.

        Raises:
            KeyError: If the preset is unknown
        """
        if name not in PRESETS:
            raise KeyError(f"Unknown preset: {name}")
        self.session.adjustments = ColorAdjustments(**PRESETS[name])
        logger.debug(f"Applied preset: {name}")
        self._changed()

    # Geometry

    def rotate(self) -> None:
        self.session.transform = self.session.transform.rotated()
        self._changed()

    def flip_horizontal(self) -> None:
        self.session.transform = self.session.transform.flipped_horizontal()
        self._changed()

    def flip_vertical(self) -> None:
        self.session.transform = self.session.transform.flipped_vertical()
        self._changed()

    def reset(self) -> None:
        """Return adjustments, geometry and the applied crop to identity."""
        self.session.adjustments = ColorAdjustments()
        self.session.transform = GeometricTransform()
        self.session.crop = None
        logger.debug("Edit session reset to identity")
        self._changed()

    def _changed(self) -> None:
        self.style = render(self.session.adjustments, self.session.transform)
        for listener in list(self._listeners):
            listener(self.style)
