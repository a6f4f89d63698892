"""Loading captured images from URLs or local paths."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import httpx


class InvalidImageReferenceError(ValueError):
    """Raised when an image reference cannot be interpreted."""


class ImageSource(Protocol):
    """Interface for resolving an image reference to bytes."""

    async def load(self, image_ref: str) -> bytes:
        """Return the raw bytes of the referenced image."""


def check_image_ref(image_ref: object) -> str:
    """Validate an image reference and return it stripped."""
    if not isinstance(image_ref, str) or not image_ref.strip():
        raise InvalidImageReferenceError("Image reference must be a non-empty string")
    cleaned = image_ref.strip()
    scheme = urlparse(cleaned).scheme.lower()
    # Single letters are Windows drive prefixes, not URL schemes.
    if scheme and len(scheme) > 1 and scheme not in {"http", "https", "file"}:
        raise InvalidImageReferenceError(f"Unsupported image scheme: {scheme}")
    return cleaned


@dataclass
class HttpxImageSource(ImageSource):
    """Image source using httpx for remote images and the filesystem otherwise."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImageSource":
        """Create an image source with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def load(self, image_ref: str) -> bytes:
        """Download or read the referenced image."""
        cleaned = check_image_ref(image_ref)
        parsed = urlparse(cleaned)
        if parsed.scheme in {"http", "https"}:
            response = await self.http_client.get(
                cleaned, timeout=20, follow_redirects=True
            )
            response.raise_for_status()
            return response.content
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(cleaned)
        return await asyncio.to_thread(path.read_bytes)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
