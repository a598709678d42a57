"""
Unit tests for color_filters module.

Tests the CSS filter function implementations and the luminosity overlay
used for the export brightness pass.
"""

import numpy as np
import pytest
from PIL import Image

from AIS_Libs.ImageEditingLib.color_filters import (
    apply_filter_chain,
    apply_luminosity_overlay,
    overlay_lightness_for,
)


def single_pixel(color):
    mode = "RGBA" if len(color) == 4 else "RGB"
    return Image.new(mode, (1, 1), color)


class TestApplyFilterChain:
    """Tests for apply_filter_chain function."""

    def test_identity_chain_is_pixel_identical(self, make_gradient):
        """Should return an identical copy when every step is at identity."""
        image = make_gradient(32, 16)
        steps = [("brightness", 100), ("contrast", 100), ("saturate", 100),
                 ("grayscale", 0), ("sepia", 0), ("invert", 0)]

        result = apply_filter_chain(image, steps)

        assert result is not image
        assert result.tobytes() == image.tobytes()

    def test_full_invert(self):
        """Should invert each channel."""
        result = apply_filter_chain(single_pixel((255, 0, 0)), [("invert", 100)])
        assert result.getpixel((0, 0)) == (0, 255, 255)

    def test_full_grayscale_uses_luma_weights(self):
        """Should map pure red to its Rec. 709 luma on every channel."""
        result = apply_filter_chain(single_pixel((255, 0, 0)), [("grayscale", 100)])
        assert result.getpixel((0, 0)) == (54, 54, 54)

    def test_zero_contrast_is_mid_gray(self):
        """Should collapse every color to mid gray."""
        result = apply_filter_chain(single_pixel((10, 200, 90)), [("contrast", 0)])
        assert result.getpixel((0, 0)) == (128, 128, 128)

    def test_zero_saturation(self):
        """Should desaturate pure red using the saturate matrix."""
        result = apply_filter_chain(single_pixel((255, 0, 0)), [("saturate", 0)])
        r, g, b = result.getpixel((0, 0))
        assert r == g == b == 54

    def test_full_sepia_on_white(self):
        """Should tint white with the sepia matrix, clamping overflow."""
        result = apply_filter_chain(single_pixel((255, 255, 255)), [("sepia", 100)])
        assert result.getpixel((0, 0)) == (255, 255, 239)

    def test_brightness_scales_channels(self):
        """Should multiply channels by the brightness factor."""
        result = apply_filter_chain(single_pixel((200, 100, 50)), [("brightness", 50)])
        assert result.getpixel((0, 0)) == (100, 50, 25)

    def test_preserves_alpha(self):
        """Should leave the alpha channel untouched."""
        result = apply_filter_chain(single_pixel((255, 0, 0, 128)), [("invert", 100)])
        assert result.mode == "RGBA"
        assert result.getpixel((0, 0)) == (0, 255, 255, 128)

    def test_steps_apply_in_order(self):
        """Should apply invert after grayscale, not before."""
        result = apply_filter_chain(
            single_pixel((255, 0, 0)), [("grayscale", 100), ("invert", 100)]
        )
        assert result.getpixel((0, 0)) == (201, 201, 201)

    def test_unknown_filter(self):
        """Should reject unknown filter names."""
        with pytest.raises(KeyError):
            apply_filter_chain(single_pixel((0, 0, 0)), [("blur", 5)])


class TestLuminosityOverlay:
    """Tests for apply_luminosity_overlay and overlay_lightness_for."""

    def test_lightness_for_brightness(self):
        """Should map 100% brightness to neutral 50% lightness."""
        assert overlay_lightness_for(100) == 0.5
        assert overlay_lightness_for(200) == 1.0
        assert overlay_lightness_for(0) == 0.0

    def test_neutral_overlay_is_noop(self, make_gradient):
        """Should not change the image at neutral lightness."""
        image = make_gradient(16, 16)
        result = apply_luminosity_overlay(image, 0.5)
        assert result.tobytes() == image.tobytes()

    def test_black_overlay_darkens_to_black(self, make_gradient):
        """Should darken everything to black at zero lightness."""
        result = apply_luminosity_overlay(make_gradient(8, 8), 0.0)
        assert np.asarray(result).max() == 0

    def test_brightens_gray(self):
        """Should double the luminance of a mid-dark gray at full lightness."""
        result = apply_luminosity_overlay(single_pixel((100, 100, 100)), 1.0)
        assert result.getpixel((0, 0)) == (200, 200, 200)

    def test_keeps_hue_when_darkening(self):
        """Should darken red while keeping it red."""
        result = apply_luminosity_overlay(single_pixel((200, 0, 0)), 0.25)
        r, g, b = result.getpixel((0, 0))
        assert abs(r - 100) <= 1
        assert g == 0
        assert b == 0

    def test_preserves_alpha(self):
        """Should leave alpha untouched."""
        result = apply_luminosity_overlay(single_pixel((100, 100, 100, 40)), 0.25)
        assert result.getpixel((0, 0))[3] == 40
