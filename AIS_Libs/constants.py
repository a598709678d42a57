"""
Constants and configuration values for AI Image Studio.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Generation request constants
ASPECT_RATIOS = ("1:1", "3:4", "4:3", "9:16", "16:9")
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_OUTPUT_MIME_TYPE = "image/jpeg"
API_KEY_HEADER = "x-goog-api-key"

# Environment variable names
ENV_API_KEY = "GEMINI_API_KEY"
ENV_API_KEY_FALLBACK = "API_KEY"
ENV_IMAGE_MODEL = "AIS_IMAGE_MODEL"
ENV_API_BASE_URL = "AIS_API_BASE_URL"
ENV_LOG_LEVEL = "AIS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Color adjustment ranges (percent)
ADJUSTMENT_RANGES = {
    "brightness": (0, 200),
    "contrast": (0, 200),
    "saturate": (0, 200),
    "grayscale": (0, 100),
    "sepia": (0, 100),
    "invert": (0, 100),
}
# Fixed order of the color filter chain
FILTER_ORDER = ("brightness", "contrast", "saturate", "grayscale", "sepia", "invert")
IDENTITY_ADJUSTMENTS = {
    "brightness": 100,
    "contrast": 100,
    "saturate": 100,
    "grayscale": 0,
    "sepia": 0,
    "invert": 0,
}

# Named presets, each overriding the identity adjustments
PRESETS = {
    "grayscale": {"grayscale": 100},
    "sepia": {"sepia": 100},
    "invert": {"invert": 100},
}

# Geometry
ROTATION_STEP = 90
FULL_TURN = 360

# Export constants
EDITED_IMAGE_STEM = "edited-image"
GENERATED_IMAGE_STEM = "generated-image"
DEFAULT_EXPORT_FORMAT = "JPEG"
DEFAULT_EXPORT_QUALITY = 90
# Lightness of the neutral overlay used by the brightness pass
NEUTRAL_OVERLAY_LIGHTNESS = 0.5
MIME_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/webp": "webp",
}
FORMAT_EXTENSIONS = {
    "JPEG": "jpeg",
    "PNG": "png",
    "WEBP": "webp",
}

# UI constants
DEFAULT_WINDOW_WIDTH = 1100
DEFAULT_WINDOW_HEIGHT = 760
DEFAULT_EDITOR_WIDTH = 1280
DEFAULT_EDITOR_HEIGHT = 820
PREVIEW_MAX_SIZE = 900
CROP_OVERLAY_COLOR = "#a855f7"

# User-facing messages
MSG_BLANK_PROMPT = "Please enter a prompt to generate an image."
MSG_EMPTY_RESULT = "No image was generated. The response was empty."
MSG_IMAGE_LOAD_FAILED = (
    "Could not load image for editing. Please try downloading the original instead."
)
