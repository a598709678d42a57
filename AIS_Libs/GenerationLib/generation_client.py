"""
Text-to-image generation client.

Processing flow:
    1. Validate the prompt and aspect ratio locally.
    2. Submit one predict request through the shared service handle.
    3. Decode the first prediction's Base64 image bytes.
    4. Return a SourceImage or raise GenerationError.

Error handling strategy:
    - Blank prompts and unknown aspect ratios raise ValidationError and never
      reach the network.
    - Transport failures, non-200 responses, malformed bodies and empty or
      undecodable results all raise GenerationError. Nothing is retried.

Classes:
    ImageServiceHandle: Service handle built once from ServiceConfig
    GenerationClient: Single-attempt prompt-to-image call

Functions:
    validate_request: Local request validation
"""

import base64
import binascii
import logging
from typing import Any, Dict, Optional

import requests

from AIS_Libs.config import ServiceConfig
from AIS_Libs.constants import API_KEY_HEADER, ASPECT_RATIOS, MSG_BLANK_PROMPT, MSG_EMPTY_RESULT
from AIS_Libs.errors import GenerationError, ImageLoadError, ValidationError
from AIS_Libs.ImageEditingLib.image_editing_ops import decode_image
from AIS_Libs.ImageEditingLib.image_models import SourceImage

logger = logging.getLogger(__name__)


def validate_request(prompt: str, aspect_ratio: str) -> str:
    """
    Validate a generation request.

    Args:
        prompt: User prompt
        aspect_ratio: One of ASPECT_RATIOS

    Returns:
        The prompt with surrounding whitespace removed

    Raises:
        ValidationError: If the prompt is blank or the aspect ratio unsupported
    """
    cleaned = (prompt or "").strip()
    if not cleaned:
        raise ValidationError(MSG_BLANK_PROMPT)

    if aspect_ratio not in ASPECT_RATIOS:
        raise ValidationError(
            f"Unsupported aspect ratio '{aspect_ratio}'. "
            f"Choose one of: {', '.join(ASPECT_RATIOS)}"
        )

    return cleaned


class ImageServiceHandle:
    """
    Stateless handle to the remote image service.

    Constructed once at process start and passed explicitly to the clients
    that issue requests.
    """

    def __init__(self, config: ServiceConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self._session = session if session is not None else requests.Session()

    def build_payload(self, prompt: str, aspect_ratio: str) -> Dict[str, Any]:
        return {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": aspect_ratio,
                "outputOptions": {"mimeType": self.config.output_mime_type},
            },
        }

    def predict(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Post a predict request and return the parsed JSON body.

        Raises:
            GenerationError: On a missing API key, transport error, non-200
                status or a non-JSON body
        """
        if not self.config.has_api_key:
            raise GenerationError("Failed to generate image: API key is not configured")

        headers = {API_KEY_HEADER: self.config.api_key, "Content-Type": "application/json"}
        try:
            response = self._session.post(self.config.predict_url, json=payload, headers=headers)
        except requests.RequestException as exc:
            raise GenerationError(f"Failed to generate image: {exc}") from exc

        if response.status_code != 200:
            raise GenerationError(
                f"Failed to generate image: request failed with status "
                f"{response.status_code}: {response.text}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise GenerationError(f"Failed to generate image: invalid JSON response ({exc})") from exc

    def close(self) -> None:
        self._session.close()


class GenerationClient:
    def __init__(self, service: ImageServiceHandle) -> None:
        self.service = service

    def generate(self, prompt: str, aspect_ratio: str) -> SourceImage:
        """
        Generate one image for a prompt.

        Args:
            prompt: Non-blank text prompt
            aspect_ratio: One of ASPECT_RATIOS

        Returns:
            The generated image as a SourceImage

        Raises:
            ValidationError: If the request is invalid (no request is sent)
            GenerationError: If the service call fails or returns no image
        """
        cleaned = validate_request(prompt, aspect_ratio)
        logger.info(f"Requesting image generation (aspect ratio {aspect_ratio})")

        body = self.service.predict(self.service.build_payload(cleaned, aspect_ratio))
        predictions = body.get("predictions") if isinstance(body, dict) else None
        if not isinstance(predictions, list) or not predictions:
            raise GenerationError(f"Failed to generate image: {MSG_EMPTY_RESULT}")

        first = predictions[0]
        encoded = first.get("bytesBase64Encoded") if isinstance(first, dict) else None
        if not encoded or not isinstance(encoded, str):
            raise GenerationError(f"Failed to generate image: {MSG_EMPTY_RESULT}")

        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise GenerationError(f"Failed to generate image: undecodable image data ({exc})") from exc

        try:
            decode_image(data)
        except ImageLoadError as exc:
            raise GenerationError(f"Failed to generate image: result is not an image ({exc})") from exc

        mime_type = first.get("mimeType") or self.service.config.output_mime_type
        logger.info(f"Received generated image ({len(data)} bytes, {mime_type})")
        return SourceImage(data=data, mime_type=mime_type)
