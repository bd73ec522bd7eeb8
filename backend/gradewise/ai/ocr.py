"""
Gradewise - OCR Service
Handwriting recognition for scanned answers via a vision completion endpoint.

Accepts raw image bytes, a base64 string, a data URI or an http(s) URL and
returns the recognized text with a 0-100 confidence.
"""
import base64
import json
import logging
from typing import Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from gradewise.ai.core.llm import strip_code_fences
from gradewise.ai.core.telemetry import stage_span
from gradewise.core.config import settings
from gradewise.schemas.ai import OCRResult

logger = logging.getLogger(__name__)


class OCRServiceError(Exception):
    """OCR engine unreachable or returned unusable output. Transient."""
    pass


class OCRReply(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    text: str = Field(strict=True)
    confidence: float = Field(strict=True)


def guess_media_type(image_base64: str) -> str:
    """Determine image type from the base64 header, defaulting to jpeg."""
    if image_base64.startswith("iVBOR"):
        return "image/png"
    if image_base64.startswith("R0lGOD"):
        return "image/gif"
    if image_base64.startswith("UklGR"):
        return "image/webp"
    return "image/jpeg"


def to_image_url(image: Union[str, bytes]) -> str:
    """
    Normalize an image reference to something the vision API accepts.

    Bytes are base64 encoded; http(s) URLs and data URIs pass through;
    anything else is treated as bare base64.
    """
    if isinstance(image, (bytes, bytearray)):
        if not image:
            raise ValueError("Empty image")
        encoded = base64.b64encode(bytes(image)).decode("ascii")
        return f"data:{guess_media_type(encoded)};base64,{encoded}"

    image = image.strip()
    if not image:
        raise ValueError("Empty image")
    if image.startswith(("http://", "https://", "data:")):
        return image
    if "base64," in image:
        image = image.split("base64,", 1)[1]
    return f"data:{guess_media_type(image)};base64,{image}"


class OCRService:
    """Single-attempt OCR client. Errors are surfaced to the caller."""

    OCR_PROMPT = """You are an OCR system. Extract ALL text from this image exactly as it appears.
The image is a student's handwritten answer sheet. Transcribe the handwriting as faithfully as possible.
Preserve line breaks. Do not correct spelling or add commentary.

Respond with ONLY this JSON (no markdown):
{"text": "<the transcribed text>", "confidence": <0-100, how legible the text was>}"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.OCR_API_URL
        self.model = model or settings.OCR_MODEL
        self.timeout = timeout or settings.OCR_TIMEOUT_SECONDS
        self._transport = transport

    async def _call_vision_api(self, image_url: str) -> str:
        """POST one image to the vision endpoint and return the message text."""
        headers = {
            "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self.OCR_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {"url": image_url, "detail": "high"},
                        },
                    ],
                }
            ],
            "response_format": {"type": "json_object"},
            "max_tokens": 2000,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.api_url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()

        content = data["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            # null content means the model refused the image
            logger.error("OCR reply had no text content: %s", data["choices"][0]["message"].get("refusal"))
            raise OCRServiceError("OCR engine returned no text content")
        return content

    async def process_image(self, image: Union[str, bytes]) -> OCRResult:
        """
        Recognize the text in an image.

        Raises:
            ValueError: If the image reference is empty.
            OCRServiceError: If the engine is unreachable or its reply is malformed.
        """
        image_url = to_image_url(image)

        with stage_span("ocr.process_image", {"ocr.model": self.model}) as span:
            try:
                content = await self._call_vision_api(image_url)
                reply = OCRReply.model_validate(json.loads(strip_code_fences(content)))
            except httpx.HTTPError as e:
                logger.error("OCR processing error: %s", e)
                raise OCRServiceError("Failed to process image with OCR") from e
            except (KeyError, IndexError, TypeError, ValueError, SchemaError) as e:
                # json.JSONDecodeError is a ValueError
                logger.error("OCR returned malformed output: %s", e)
                raise OCRServiceError("OCR engine returned malformed output") from e

            confidence = max(0.0, min(100.0, reply.confidence))
            span.set_attribute("ocr.confidence", confidence)
            span.set_attribute("ocr.text_length", len(reply.text))

        return OCRResult(text=reply.text, confidence=confidence)


# Singleton instance
ocr_service = OCRService()
