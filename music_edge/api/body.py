"""Lenient request body parsing shared by the collaborator endpoints."""
from __future__ import annotations

import json
from typing import Any

from fastapi import Request


async def read_json_body(request: Request) -> Any:
    """Return the decoded JSON body, or an empty object when it cannot be parsed."""

    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
