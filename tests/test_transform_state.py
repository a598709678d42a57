"""
Unit tests for transform_state module.

Tests color adjustment setters, presets, geometric operations, reset and
style notifications.
"""

import pytest

from AIS_Libs.ImageEditingLib.crop_selector import CropSelector
from AIS_Libs.ImageEditingLib.image_models import (
    ColorAdjustments,
    CropRectangle,
    EditSession,
    GeometricTransform,
)
from AIS_Libs.ImageEditingLib.transform_state import TransformState, clamp_adjustment


class TestGeometry:
    """Tests for rotate and flip operations."""

    @pytest.mark.parametrize("turns", range(9))
    def test_rotation_wraps(self, turns):
        """Should hold (90 * n) mod 360 after n rotations."""
        state = TransformState()
        for _ in range(turns):
            state.rotate()
        assert state.transform.rotation == (90 * turns) % 360

    def test_flip_horizontal_is_involutive(self):
        """Should restore scale_x after two horizontal flips."""
        state = TransformState()
        state.flip_horizontal()
        assert state.transform.scale_x == -1
        state.flip_horizontal()
        assert state.transform.scale_x == 1
        assert state.transform.scale_y == 1

    def test_flip_vertical_is_involutive(self):
        """Should restore scale_y after two vertical flips."""
        state = TransformState()
        state.flip_vertical()
        assert state.transform.scale_y == -1
        state.flip_vertical()
        assert state.transform.scale_y == 1


class TestAdjustments:
    """Tests for adjustment setters and presets."""

    def test_preset_exclusivity(self):
        """Should clear grayscale when sepia is applied afterwards."""
        state = TransformState()
        state.apply_preset("grayscale")
        state.apply_preset("sepia")
        assert state.adjustments == ColorAdjustments(grayscale=0, sepia=100)

    def test_preset_discards_slider_values(self):
        """Should reset slider adjustments to defaults when a preset is applied."""
        state = TransformState()
        state.set_brightness(150)
        state.apply_preset("invert")
        assert state.adjustments.brightness == 100
        assert state.adjustments.invert == 100

    def test_named_setters(self):
        """Should update exactly one field per setter."""
        state = TransformState()
        state.set_contrast(120)
        state.set_saturate(80)
        assert state.adjustments == ColorAdjustments(contrast=120, saturate=80)

    def test_setters_clamp_out_of_range_values(self):
        """Should clamp values to the adjustment's range."""
        state = TransformState()
        state.set_brightness(250)
        state.set_sepia(-5)
        state.set_invert(100.6)
        assert state.adjustments.brightness == 200
        assert state.adjustments.sepia == 0
        assert state.adjustments.invert == 100

    def test_clamp_adjustment(self):
        """Should round and clamp to the documented ranges."""
        assert clamp_adjustment("grayscale", 150) == 100
        assert clamp_adjustment("contrast", 99.6) == 100

    def test_unknown_names(self):
        """Should raise KeyError for unknown adjustments or presets."""
        state = TransformState()
        with pytest.raises(KeyError):
            state.set_adjustment("hue", 10)
        with pytest.raises(KeyError):
            state.apply_preset("vintage")


class TestResetAndNotifications:
    """Tests for reset and style listeners."""

    def test_reset_restores_identity(self):
        """Should reset adjustments, geometry and the applied crop."""
        session = EditSession(crop=CropRectangle(1, 2, 3, 4))
        state = TransformState(session)
        state.set_brightness(40)
        state.rotate()
        state.flip_vertical()

        state.reset()

        assert session.adjustments == ColorAdjustments()
        assert session.transform == GeometricTransform()
        assert session.crop is None
        assert session.is_identity

    def test_listeners_receive_recomputed_style(self):
        """Should notify subscribers with the new style after each mutation."""
        state = TransformState()
        received = []
        state.subscribe(received.append)

        state.rotate()
        state.set_grayscale(30)

        assert len(received) == 2
        assert received[-1] is state.style
        assert state.style.rotation == 90
        assert ("grayscale", 30) in state.style.filters

    def test_unsubscribe(self):
        """Should stop notifying removed listeners."""
        state = TransformState()
        received = []
        state.subscribe(received.append)
        state.unsubscribe(received.append)
        state.rotate()
        assert received == []

    def test_mutations_leave_crop_draft_untouched(self):
        """Should not disturb an in-progress crop selection."""
        session = EditSession()
        state = TransformState(session)
        selector = CropSelector(session)
        selector.begin(200, 100)
        selector.pointer_down(10, 10)
        selector.pointer_move(60, 40)
        draft = selector.draft

        state.apply_preset("sepia")
        state.set_contrast(150)

        assert selector.draft == draft
        assert selector.phase == "dragging"
        assert session.is_cropping
