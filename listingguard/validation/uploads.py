"""
Upload checks for the file store.

Only images below a fixed size ceiling may be uploaded. Both limits are
module constants and cannot be changed per request.
"""

from __future__ import annotations

import re
from typing import Any

from listingguard.types import FileMetadata

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
IMAGE_CONTENT_TYPE = re.compile(r"image/.*")


def is_valid_image_upload(metadata: FileMetadata | None) -> bool:
    """
    Check that an upload is an image strictly smaller than 5 MiB.

    Example:
        >>> is_valid_image_upload(FileMetadata("image/png", 1024))
        True
        >>> is_valid_image_upload(FileMetadata("application/pdf", 1024))
        False
    """
    if metadata is None:
        return False
    return _is_image_type(metadata.content_type) and _is_under_ceiling(metadata.size)


def _is_image_type(content_type: Any) -> bool:
    return isinstance(content_type, str) and IMAGE_CONTENT_TYPE.fullmatch(content_type) is not None


def _is_under_ceiling(size: Any) -> bool:
    if isinstance(size, bool) or not isinstance(size, int):
        return False
    return 0 <= size < MAX_UPLOAD_BYTES
