"""
Core byte-level image operations for AI Image Studio.

This module provides the low-level helpers shared by the export compositor
and the windows: decoding source bytes, encoding rasters, naming downloads
and writing them to disk.

Functions:
    decode_image: Decode encoded bytes into a fully loaded PIL Image
    encode_image: Encode a PIL Image into compressed bytes
    working_mode: RGB or RGBA, whichever keeps the image's transparency
    export_filename: Build a download filename such as 'edited-image.jpeg'
    persist_bytes: Write a payload to disk without clobbering existing files
"""

from io import BytesIO
from pathlib import Path
from typing import Any

from AIS_Libs.constants import DEFAULT_EXPORT_FORMAT, DEFAULT_EXPORT_QUALITY, FORMAT_EXTENSIONS
from AIS_Libs.errors import ImageLoadError
from AIS_Libs.pillow_compat import Image, UnidentifiedImageError


def decode_image(data: bytes) -> Any:
    """
    Decode encoded image bytes.

    The image is fully loaded so that truncated or corrupt data fails here
    rather than halfway through compositing.

    Args:
        data: Encoded image bytes (JPEG, PNG, ...)

    Returns:
        A loaded PIL Image

    Raises:
        ImageLoadError: If the bytes are empty or cannot be decoded
    """
    if not data:
        raise ImageLoadError("Image data is empty")

    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageLoadError(f"Could not decode image: {exc}") from exc

    return image


def working_mode(image: Any) -> str:
    """Return 'RGBA' when the image carries any transparency, else 'RGB'."""
    if "A" in image.getbands() or "transparency" in image.info:
        return "RGBA"
    return "RGB"


def encode_image(
    image: Any,
    image_format: str = DEFAULT_EXPORT_FORMAT,
    quality: int = DEFAULT_EXPORT_QUALITY,
) -> bytes:
    """
    Encode an image as compressed bytes.

    JPEG output has no alpha channel, so transparent areas are flattened onto
    black, the way a canvas exports them.

    Args:
        image: PIL Image to encode
        image_format: Pillow format name ('JPEG', 'PNG', 'WEBP'); 'JPG' is accepted
        quality: 1-100, used by lossy formats

    Returns:
        The encoded bytes
    """
    save_format = image_format.upper()
    if save_format == "JPG":
        save_format = "JPEG"

    kwargs = {"format": save_format}
    if save_format in ("JPEG", "WEBP"):
        kwargs["quality"] = max(1, min(100, int(quality)))

    if save_format == "JPEG" and image.mode != "RGB":
        if "A" in image.getbands():
            flattened = Image.new("RGB", image.size, (0, 0, 0))
            flattened.paste(image.convert("RGBA"), mask=image.convert("RGBA").getchannel("A"))
            image = flattened
        else:
            image = image.convert("RGB")

    buffer = BytesIO()
    image.save(buffer, **kwargs)
    return buffer.getvalue()


def export_filename(stem: str, image_format: str = DEFAULT_EXPORT_FORMAT) -> str:
    """Return e.g. 'edited-image.jpeg' for ('edited-image', 'JPEG')."""
    save_format = image_format.upper()
    if save_format == "JPG":
        save_format = "JPEG"
    extension = FORMAT_EXTENSIONS.get(save_format, save_format.lower())
    return f"{stem}.{extension}"


def persist_bytes(payload: bytes, output_path: Path) -> Path:
    """
    Write a payload to disk the way a browser download does.

    An existing file is never replaced: ' (1)', ' (2)', ... is appended to
    the stem until a free name is found.

    Args:
        payload: Bytes to write
        output_path: Desired destination file

    Returns:
        The path actually written

    Raises:
        OSError: If the parent directory does not exist or the file cannot be written
    """
    output_path = Path(output_path)
    parent = output_path.parent

    if not parent.exists():
        raise OSError(f"Output directory does not exist: {parent}")

    if not parent.is_dir():
        raise OSError(f"Output path is not a directory: {parent}")

    target = output_path
    counter = 1
    while target.exists():
        target = parent / f"{output_path.stem} ({counter}){output_path.suffix}"
        counter += 1

    target.write_bytes(payload)
    return target
