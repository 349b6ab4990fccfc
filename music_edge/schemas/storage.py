"""Pydantic schemas for the key-value storage endpoint."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StorageWriteRequest(BaseModel):
    """Inbound payload for ``POST /api/storage``."""

    data: dict[str, Any]


class StorageDeleteRequest(BaseModel):
    """Inbound payload for ``DELETE /api/storage``."""

    keys: list[Any] = Field(default_factory=list)

    @field_validator("keys", mode="before")
    @classmethod
    def _coerce_keys(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return value

    def string_keys(self) -> list[str]:
        return [key for key in self.keys if isinstance(key, str) and key]


class StorageResponse(BaseModel):
    """Outbound payload; unset fields are left out of the JSON body."""

    model_config = ConfigDict(populate_by_name=True)

    d1_available: bool = Field(..., alias="d1Available")
    data: Optional[dict[str, Optional[str]]] = None
    updated: Optional[int] = None
    deleted: Optional[int] = None
