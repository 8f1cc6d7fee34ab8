"""
Image upload wrapper.

The uploader itself is an opaque async collaborator returning a URL.
This module only enforces the size limit and turns every failure into
an UploadError so callers have one thing to catch.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from .errors import UploadError

logger = logging.getLogger(__name__)

Uploader = Callable[[bytes, str], Awaitable[str]]

DEFAULT_MAX_BYTES = 20 * 1024 * 1024


async def upload_image(
    uploader: Uploader,
    data: bytes,
    filename: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> str:
    """Upload image bytes and return the URL to store verbatim."""
    if not data:
        raise UploadError(f"{filename} is empty.")
    if len(data) > max_bytes:
        raise UploadError(
            f"{filename} is {len(data)} bytes; images must be {max_bytes} bytes or less."
        )

    try:
        url = await uploader(data, filename)
    except UploadError:
        raise
    except Exception as e:
        logger.warning("Upload of %s failed: %s", filename, e)
        raise UploadError(f"Upload of {filename} failed: {e}") from e

    if not url:
        raise UploadError(f"Upload of {filename} returned no URL.")
    return url
