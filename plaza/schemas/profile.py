"""Pydantic schemas for profiles."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from plaza.schemas.common import ActionPayload


class ProfileRead(BaseModel):
    """Public view of a profile."""

    id: str
    username: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    occupation: Optional[str] = None
    motivation: Optional[str] = None

    model_config = {"from_attributes": True}


class SetUsernameRequest(ActionPayload):
    username: Optional[str] = None


class GetProfileRequest(ActionPayload):
    username: Optional[str] = None


class UpdateProfileRequest(ActionPayload):
    # Values are validated field by field in ProfileService.update_profile.
    patch: Optional[dict[str, Any]] = Field(default=None)
