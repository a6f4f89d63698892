"""Shared plumbing for LLM vision calls."""

import base64
import time
from typing import Protocol


class VisionClient(Protocol):
    """Interface for structured LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured data matching `schema` for the image."""


def to_data_url(image_bytes: bytes) -> str:
    """Convert image bytes to a base64 data URL."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer an image MIME type from its file signature."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[4:12] in {b"ftypheic", b"ftypheix", b"ftypmif1"}:
        return "image/heic"
    return "image/jpeg"


def elapsed_ms(started: float) -> int:
    """Return milliseconds since a `time.perf_counter()` reading."""
    return int((time.perf_counter() - started) * 1000)
