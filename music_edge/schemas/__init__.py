"""Pydantic schemas for the collaborator endpoints."""

from .login import LoginResponse  # noqa: F401
from .storage import StorageDeleteRequest, StorageResponse, StorageWriteRequest  # noqa: F401
