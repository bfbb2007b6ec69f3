"""
Blob storage for property images.

Uploads are a single authenticated PUT to the blob API, which answers with
the public URL of the stored object.
"""

import logging
import re
import time
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from listings.core.config import settings
from listings.core.exceptions import BlobUploadError, ConfigurationError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class UploadedBlob(BaseModel):
    url: str
    pathname: str
    content_type: Optional[str] = None
    size: int


def image_pathname(property_id: str, filename: str) -> str:
    """``properties/<id>/<timestamp>-<safe filename>``"""
    safe_name = _UNSAFE_CHARS.sub("-", filename or "image").strip("-") or "image"
    return f"properties/{property_id}/{int(time.time() * 1000)}-{safe_name}"


def resolve_image_url(url: str) -> str:
    """
    Turn a stored blob path into a public URL.

    Absolute URLs are returned unchanged; relative paths are joined onto
    BLOB_PUBLIC_URL when it is configured.
    """
    if not url or url.startswith(("http://", "https://")):
        return url
    if not settings.BLOB_PUBLIC_URL:
        return url
    return f"{settings.BLOB_PUBLIC_URL.rstrip('/')}/{url.lstrip('/')}"


class BlobStorageClient:
    """Client for the blob API."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.token = token if token is not None else settings.BLOB_READ_WRITE_TOKEN
        self.base_url = (base_url or settings.BLOB_API_URL).rstrip("/")
        self.timeout = timeout or settings.BLOB_UPLOAD_TIMEOUT
        self.transport = transport

    def upload(self, pathname: str, content: bytes, content_type: Optional[str] = None) -> UploadedBlob:
        """
        Store bytes under pathname and return the public URL.

        Raises:
            ConfigurationError: no BLOB_READ_WRITE_TOKEN.
            BlobUploadError: transport failure, non-2xx status or no URL in the reply.
        """
        if not self.token:
            raise ConfigurationError("BLOB_READ_WRITE_TOKEN is not set")
        if not content:
            raise BlobUploadError("Refusing to upload an empty file")

        headers = {
            "authorization": f"Bearer {self.token}",
            "x-content-type": content_type or "application/octet-stream",
        }
        url = f"{self.base_url}/{quote(pathname)}"

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.put(url, content=content, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise BlobUploadError(
                f"Blob upload failed with status {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise BlobUploadError(f"Blob upload failed: {e}") from e

        public_url = data.get("url")
        if not public_url:
            raise BlobUploadError("Blob API response did not include a URL")

        logger.info(f"Uploaded {len(content)} bytes to {public_url}")
        return UploadedBlob(
            url=public_url,
            pathname=data.get("pathname", pathname),
            content_type=content_type,
            size=len(content),
        )


def get_blob_client() -> BlobStorageClient:
    return BlobStorageClient()
