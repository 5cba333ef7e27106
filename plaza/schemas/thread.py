"""Pydantic schemas for direct-message threads and their messages."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from plaza.models.thread import Thread
from plaza.schemas.common import ActionPayload


class ThreadRead(BaseModel):
    """Thread as seen by one participant; other_* is the counterparty."""

    id: int
    listing_id: Optional[int] = None
    user_a_id: str
    user_b_id: str
    user_a_username: Optional[str] = None
    user_b_username: Optional[str] = None
    other_id: str
    other_username: Optional[str] = None
    created_at: datetime

    @classmethod
    def for_viewer(cls, thread: Thread, viewer_id: str) -> "ThreadRead":
        if thread.user_a_id == viewer_id:
            other_id, other_username = thread.user_b_id, thread.user_b_username
        else:
            other_id, other_username = thread.user_a_id, thread.user_a_username
        return cls(
            id=thread.id,
            listing_id=thread.listing_id,
            user_a_id=thread.user_a_id,
            user_b_id=thread.user_b_id,
            user_a_username=thread.user_a_username,
            user_b_username=thread.user_b_username,
            other_id=other_id,
            other_username=other_username,
            created_at=thread.created_at,
        )


class ThreadMessageRead(BaseModel):
    id: int
    thread_id: int
    sender_id: str
    sender_username: Optional[str] = None
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class StartDmRequest(ActionPayload):
    target_username: Optional[str] = None
    listing_id: Optional[int] = None


class ThreadRequest(ActionPayload):
    thread_id: Optional[int] = None


class ListDmMessagesRequest(ThreadRequest):
    after_id: Optional[int] = None
    limit: int = 50


class SendDmMessageRequest(ThreadRequest):
    content: Optional[str] = None


class ListDmThreadsRequest(ActionPayload):
    listing_id: Optional[int] = None
    limit: int = 50
