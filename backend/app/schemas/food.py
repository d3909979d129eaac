"""
Foods API Backend — Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the API contract for the foods resource.
How:   FastAPI validates request bodies against the *Create/*Update models,
       serializes responses through the envelope models, and builds the
       OpenAPI document from both.

Response envelope:
    Every successful response is `{"success": true, "data": ...}`; the list
    endpoint adds `count` (items on this page) and `pagination`.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.query import PaginationResult


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what clients send
# ══════════════════════════════════════════════════════════════════════════


class FoodBase(BaseModel):
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=50)
    calories: Optional[int] = Field(default=None, ge=0, description="kcal per serving")
    price: Optional[float] = Field(default=None, ge=0)


class FoodCreate(FoodBase):
    """
    Body of POST /api/v1/foods.

    Only `name` is required; the slug and photo are managed by the server.
    """
    name: str = Field(min_length=1, max_length=50, description="Unique food name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Please add a name")
        return stripped


class FoodUpdate(FoodBase):
    """Body of PUT /api/v1/foods/{id}; only the fields sent are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        stripped = v.strip()
        if not stripped:
            raise ValueError("Please add a name")
        return stripped


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class FoodResponse(FoodBase):
    """Full representation of a food document."""
    id: uuid.UUID
    name: str
    slug: str
    photo: str
    created_at: datetime

    model_config = {"from_attributes": True}


class FoodEnvelope(BaseModel):
    success: bool = True
    data: FoodResponse


class FoodListResponse(BaseModel):
    """
    Response of GET /api/v1/foods.

    `data` holds projected documents, so items only carry the selected
    fields (plus `id`). `pagination` omits `next`/`prev` when there is no
    such page.
    """
    success: bool = True
    count: int = Field(description="Number of documents in this page")
    pagination: PaginationResult
    data: List[Dict[str, Any]]
    # Sent as the X-Total-Count header rather than in the body
    total: int = Field(default=0, exclude=True)


class DeleteResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)


class PhotoUploadResponse(BaseModel):
    success: bool = True
    data: str = Field(description="Stored photo filename")


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "Food not found with id #3f2c...",
            "request_id": "a1b2c3d4"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
