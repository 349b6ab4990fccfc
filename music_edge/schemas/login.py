"""Pydantic schemas for the login endpoint."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class LoginResponse(BaseModel):
    success: bool
    error: Optional[str] = None
