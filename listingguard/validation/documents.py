"""
Pydantic schemas for the documents the rules protect.

Schema checks are opt-in (``GuardConfig.validate_schemas``). When
enabled, a create or update that the rules allow is still refused if the
proposed document does not match its collection schema. Documents may
carry fields beyond those listed here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from listingguard.exceptions import SchemaValidationError

logger = logging.getLogger(__name__)


class _Document(BaseModel):
    model_config = ConfigDict(extra="allow")

    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class UserProfile(_Document):
    """``users/{uid}``"""

    uid: str
    email: str | None = None
    displayName: str
    role: Literal["user", "agent", "admin"]
    phoneNumber: str | None = None
    photoURL: str | None = None
    isVerified: bool = False


class Property(_Document):
    """``properties/{id}``"""

    title: str = Field(min_length=1)
    description: str
    price: float = Field(gt=0)
    location: str
    type: Literal["commercial", "plot", "farm"]
    size: float = Field(gt=0)
    sizeUnit: Literal["sqm", "hectares", "acres"]
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    agentId: str
    status: Literal["active", "sold", "pending"]
    views: int = Field(default=0, ge=0)
    savedBy: list[str] = Field(default_factory=list)


class Inquiry(_Document):
    """``inquiries/{id}``"""

    propertyId: str
    userId: str
    agentId: str
    message: str = Field(min_length=1)
    status: Literal["new", "contacted", "closed"]
    userName: str | None = None
    userEmail: str | None = None
    userPhone: str | None = None
    agentNotes: str | None = None


class PropertyView(BaseModel):
    """``propertyViews/{id}``"""

    model_config = ConfigDict(extra="allow")

    propertyId: str
    userId: str | None = None
    timestamp: datetime | None = None
    source: str | None = None


DOCUMENT_SCHEMAS: dict[str, type[BaseModel]] = {
    "users": UserProfile,
    "properties": Property,
    "inquiries": Inquiry,
    "propertyViews": PropertyView,
}


def validate_document(collection: str, data: dict[str, Any]) -> BaseModel | None:
    """
    Validate a document against its collection schema.

    Returns:
        The parsed model, or None if the collection has no schema.

    Raises:
        SchemaValidationError: If the document does not match.

    Example:
        >>> validate_document("propertyViews", {"propertyId": "p_1"})
        PropertyView(propertyId='p_1', userId=None, timestamp=None, source=None)
    """
    schema = DOCUMENT_SCHEMAS.get(collection)
    if schema is None:
        return None

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        ]
        logger.debug(f"Schema validation failed for '{collection}': {errors}")
        raise SchemaValidationError(collection, errors) from e
