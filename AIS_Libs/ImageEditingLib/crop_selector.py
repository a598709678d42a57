"""
Pointer-driven crop rectangle selection.

CropSelector is a small state machine over pointer events on the preview
surface. Coordinates are relative to the displayed image's top-left corner.
While dragging, the pointer is clamped to the surface, so the draft rectangle
can never extend past the displayed image.

    idle --pointer_down--> dragging --pointer_move--> dragging
    dragging --pointer_up--> idle (draft kept)
    confirm / cancel --> idle, cropping mode exits

Classes:
    CropSelector: Draft/applied crop rectangle state machine
"""

import logging
from typing import Literal, Optional, Tuple

from AIS_Libs.ImageEditingLib.image_models import CropRectangle, EditSession

logger = logging.getLogger(__name__)

CropPhase = Literal["idle", "dragging"]


class CropSelector:
    def __init__(self, session: EditSession) -> None:
        self.session = session
        self.phase: CropPhase = "idle"
        self.draft: Optional[CropRectangle] = None
        self.surface_width = 0.0
        self.surface_height = 0.0
        self._anchor: Tuple[float, float] = (0.0, 0.0)

    @property
    def is_active(self) -> bool:
        return self.session.is_cropping

    @property
    def surface_size(self) -> Tuple[float, float]:
        return self.surface_width, self.surface_height

    def begin(self, surface_width: float, surface_height: float) -> None:
        """
        Enter cropping mode over a surface of the given displayed size.

        Any previously applied crop is kept but not used to seed the new draft.
        """
        self.surface_width = max(0.0, float(surface_width))
        self.surface_height = max(0.0, float(surface_height))
        self.session.is_cropping = True
        self.phase = "idle"
        self.draft = None
        logger.debug(f"Cropping started on {self.surface_width}x{self.surface_height} surface")

    def pointer_down(self, x: float, y: float) -> None:
        if not self.is_active:
            return
        ax, ay = self._clamp(x, y)
        self._anchor = (ax, ay)
        self.draft = CropRectangle(ax, ay, 0.0, 0.0)
        self.phase = "dragging"

    def pointer_move(self, x: float, y: float) -> None:
        if not self.is_active or self.phase != "dragging":
            return
        cx, cy = self._clamp(x, y)
        ax, ay = self._anchor
        self.draft = CropRectangle(
            x=min(ax, cx),
            y=min(ay, cy),
            width=abs(cx - ax),
            height=abs(cy - ay),
        )

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        if not self.is_active or self.phase != "dragging":
            return
        if x is not None and y is not None:
            self.pointer_move(x, y)
        self.phase = "idle"

    def confirm(self) -> Optional[CropRectangle]:
        """
        Promote the draft to the applied crop and leave cropping mode.

        Returns:
            The newly applied rectangle, or None when the draft had no area
            (the previously applied crop is then left as it was)
        """
        applied = None
        if self.draft is not None and self.draft.has_area:
            self.session.crop = self.draft
            applied = self.draft
            logger.debug(f"Crop applied: {applied}")
        else:
            logger.debug("Crop confirm ignored: selection has no area")
        self._exit()
        return applied

    def cancel(self) -> None:
        self._exit()

    def _exit(self) -> None:
        self.draft = None
        self.phase = "idle"
        self.session.is_cropping = False

    def _clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (
            min(max(float(x), 0.0), self.surface_width),
            min(max(float(y), 0.0), self.surface_height),
        )
