"""
GenerationLib - Text-to-image generation

This module provides the remote generation client and the operation tracker
that keeps at most one request in flight.
"""

from AIS_Libs.GenerationLib.generation_client import (
    GenerationClient,
    ImageServiceHandle,
    validate_request,
)
from AIS_Libs.GenerationLib.operation_tracker import OperationTracker

__all__ = [
    "GenerationClient",
    "ImageServiceHandle",
    "validate_request",
    "OperationTracker",
]
