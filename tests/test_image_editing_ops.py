"""
Unit tests for image_editing_ops module.

Tests decoding, encoding, download naming and saving operations.
"""

import tempfile
from pathlib import Path

import pytest
from PIL import Image

from AIS_Libs.errors import ImageLoadError
from AIS_Libs.ImageEditingLib.image_editing_ops import (
    decode_image,
    encode_image,
    export_filename,
    persist_bytes,
    working_mode,
)


class TestDecodeImage:
    """Tests for decode_image function."""

    def test_decodes_png(self, make_image_bytes):
        """Should return a loaded image with the encoded size."""
        image = decode_image(make_image_bytes((30, 20)))
        assert image.size == (30, 20)

    def test_empty_bytes(self):
        """Should reject empty data."""
        with pytest.raises(ImageLoadError):
            decode_image(b"")

    def test_garbage_bytes(self):
        """Should raise ImageLoadError for data that is not an image."""
        with pytest.raises(ImageLoadError):
            decode_image(b"definitely not an image")

    def test_truncated_bytes(self, make_image_bytes):
        """Should fail at decode time for truncated data."""
        data = make_image_bytes((64, 64), image_format="PNG")
        with pytest.raises(ImageLoadError):
            decode_image(data[: len(data) // 2])

    def test_is_an_oserror(self):
        """ImageLoadError should still be catchable as OSError."""
        with pytest.raises(OSError):
            decode_image(b"")


class TestEncodeImage:
    """Tests for encode_image function."""

    def test_jpeg_signature(self):
        """Should produce JPEG bytes by default."""
        data = encode_image(Image.new("RGB", (8, 8), (10, 20, 30)))
        assert data[:2] == b"\xff\xd8"

    def test_accepts_jpg_alias(self):
        """Should treat 'jpg' as JPEG."""
        data = encode_image(Image.new("RGB", (8, 8)), "jpg")
        assert data[:2] == b"\xff\xd8"

    def test_flattens_alpha_for_jpeg(self):
        """Transparent pixels should become black in JPEG output."""
        transparent = Image.new("RGBA", (16, 16), (255, 0, 0, 0))

        data = encode_image(transparent, "JPEG")
        decoded = decode_image(data)

        assert decoded.mode == "RGB"
        r, g, b = decoded.getpixel((8, 8))
        assert max(r, g, b) < 10

    def test_png_keeps_alpha(self):
        """PNG output should preserve the alpha channel."""
        data = encode_image(Image.new("RGBA", (4, 4), (0, 255, 0, 128)), "PNG")
        decoded = decode_image(data)
        assert decoded.mode == "RGBA"
        assert decoded.getpixel((0, 0)) == (0, 255, 0, 128)


class TestWorkingMode:
    """Tests for working_mode function."""

    def test_opaque_rgb(self):
        assert working_mode(Image.new("RGB", (4, 4))) == "RGB"

    def test_alpha_band(self):
        assert working_mode(Image.new("LA", (4, 4))) == "RGBA"

    def test_palette_transparency(self, encode_image_bytes):
        """A palette PNG with a transparency entry should keep its alpha."""
        data = encode_image_bytes(Image.new("P", (4, 4), 0), "PNG", transparency=0)
        image = decode_image(data)

        assert image.mode == "P"
        assert working_mode(image) == "RGBA"

    def test_opaque_palette(self):
        assert working_mode(Image.new("P", (4, 4))) == "RGB"


class TestExportFilename:
    """Tests for export_filename function."""

    @pytest.mark.parametrize(
        "image_format, expected",
        [("JPEG", "edited-image.jpeg"), ("jpg", "edited-image.jpeg"), ("PNG", "edited-image.png")],
    )
    def test_extension(self, image_format, expected):
        assert export_filename("edited-image", image_format) == expected


class TestPersistBytes:
    """Tests for persist_bytes function."""

    def test_writes_payload(self):
        """Should write the payload to the requested path."""
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "edited-image.jpeg"

            written = persist_bytes(b"payload", target)

            assert written == target
            assert target.read_bytes() == b"payload"

    def test_does_not_clobber(self):
        """Should pick a numbered name when the file exists."""
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "edited-image.jpeg"
            target.write_bytes(b"first")

            written = persist_bytes(b"second", target)

            assert written.name == "edited-image (1).jpeg"
            assert target.read_bytes() == b"first"
            assert written.read_bytes() == b"second"

    def test_counts_past_existing_copies(self):
        """Should keep counting until a free name is found."""
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "generated-image.png"
            target.write_bytes(b"0")
            (Path(tmpdir) / "generated-image (1).png").write_bytes(b"1")

            written = persist_bytes(b"2", target)

            assert written.name == "generated-image (2).png"
            assert target.read_bytes() == b"0"

    def test_missing_directory(self):
        """Should raise OSError when the parent directory is missing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "missing" / "edited-image.jpeg"
            with pytest.raises(OSError):
                persist_bytes(b"payload", target)
