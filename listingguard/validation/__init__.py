"""
Validation helpers for listingguard.

- Upload checks for the file store (image content type, 5 MiB ceiling)
- Pydantic schemas for documents in each collection
"""

from listingguard.validation.documents import (
    DOCUMENT_SCHEMAS,
    Inquiry,
    Property,
    PropertyView,
    UserProfile,
    validate_document,
)
from listingguard.validation.uploads import (
    IMAGE_CONTENT_TYPE,
    MAX_UPLOAD_BYTES,
    is_valid_image_upload,
)

__all__ = [
    # Uploads
    "MAX_UPLOAD_BYTES",
    "IMAGE_CONTENT_TYPE",
    "is_valid_image_upload",
    # Documents
    "DOCUMENT_SCHEMAS",
    "UserProfile",
    "Property",
    "Inquiry",
    "PropertyView",
    "validate_document",
]
