"""
ImageEditingLib - Non-destructive image editing

This module provides the edit session models, transform state, live preview
styling, crop selection and the export compositor for AI Image Studio.
"""

from AIS_Libs.ImageEditingLib.image_models import (
    ColorAdjustments,
    CropRectangle,
    EditSession,
    GeometricTransform,
    SourceImage,
    SourceRegion,
    StyleDescriptor,
)
from AIS_Libs.ImageEditingLib.transform_state import TransformState
from AIS_Libs.ImageEditingLib.preview_renderer import render, apply_style, fit_within
from AIS_Libs.ImageEditingLib.crop_selector import CropSelector
from AIS_Libs.ImageEditingLib.export_compositor import (
    ExportCompositor,
    composite_image,
    export_image,
    map_crop_region,
    output_canvas_size,
)
from AIS_Libs.ImageEditingLib.image_editing_ops import (
    decode_image,
    encode_image,
    export_filename,
    persist_bytes,
)

__all__ = [
    "ColorAdjustments",
    "CropRectangle",
    "EditSession",
    "GeometricTransform",
    "SourceImage",
    "SourceRegion",
    "StyleDescriptor",
    "TransformState",
    "render",
    "apply_style",
    "fit_within",
    "CropSelector",
    "ExportCompositor",
    "composite_image",
    "export_image",
    "map_crop_region",
    "output_canvas_size",
    "decode_image",
    "encode_image",
    "export_filename",
    "persist_bytes",
]
