"""Pydantic request/response schemas for the FastAPI endpoints."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from chat_actions.db.models import Visibility
from chat_actions.ocr.image_loader import is_data_url, is_remote


class ModelPreferenceRequest(BaseModel):
    """Chat model identifier to remember."""

    model: str


class ModelPreference(BaseModel):
    """Stored chat model identifier, if any."""

    model: str | None


class TitleRequest(BaseModel):
    """A user message in the chat SDK's ``{role, content}`` shape."""

    message: dict[str, Any]


class TitleResponse(BaseModel):
    title: str


class DeleteTrailingResponse(BaseModel):
    deleted: int


class VisibilityRequest(BaseModel):
    visibility: Visibility


class VisibilityResponse(BaseModel):
    updated: int


class Transaction(BaseModel):
    """A single card transaction as requested from the model."""

    date: str = Field(description="Posting date, yyyy/MM/dd")
    description: str
    amount: Decimal


class ExtractTransactionsRequest(BaseModel):
    """Screenshots to read, as URLs or base64 data URLs."""

    images: list[str] = Field(min_length=1)
    expected_counts: dict[str, int] | None = None

    @field_validator("images")
    @classmethod
    def _urls_only(cls, images: list[str]) -> list[str]:
        for ref in images:
            if not (is_remote(ref) or is_data_url(ref)):
                raise ValueError("images must be http(s) or data URLs")
        return images


class ExtractTransactionsResponse(BaseModel):
    """Parsed model output, or ``null`` when the model request failed.

    The payload is passed through without validation; when the model
    follows the prompt it is ``{"transactions": [Transaction, ...]}``.
    """

    transactions: Any | None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
