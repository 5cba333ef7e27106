"""Pydantic schemas for the public chat room."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from plaza.schemas.common import ActionPayload


class ChatMessageRead(BaseModel):
    id: int
    user_id: str
    username: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ListMessagesRequest(ActionPayload):
    after_id: Optional[int] = None
    limit: int = 50


class SendMessageRequest(ActionPayload):
    content: Optional[str] = None
