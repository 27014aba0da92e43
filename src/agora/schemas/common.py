# src/agora/schemas/common.py
"""Shared Pydantic schemas."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by mutations without a richer payload."""

    message: str
