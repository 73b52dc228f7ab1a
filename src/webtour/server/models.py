"""Pydantic models for the REST server.

These are the binding schemas: each model names the external keys it reads
and the rules each field must satisfy.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserIn(BaseModel):
    """User as posted by a client."""

    name: str = ""
    email: str = ""


class ValidatedUser(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr


class UserDTO(BaseModel):
    """User as handed to business logic.

    Built field by field from :class:`UserIn` so that ``is_admin`` can never be
    set from request input.
    """

    name: str
    email: str
    is_admin: bool = False


class SearchResult(BaseModel):
    ids: list[int] = Field(default_factory=list)
    active: bool = False
    length: int


class TimestampResult(BaseModel):
    timestamp: datetime


class HealthStatus(BaseModel):
    status: str
    version: str


class AdminInfo(BaseModel):
    user: str
