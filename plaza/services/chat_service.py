"""Global chat room: append and cursor-paginated listing."""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy.orm import Session as DBSession

from plaza.exceptions import ValidationError
from plaza.models.chat_message import ChatMessage
from plaza.services.profile_service import ProfileService
from plaza.utils.pagination import after_cursor, clamp_limit

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
MAX_CONTENT_LENGTH = 500


def normalize_content(content: Any, max_length: int) -> str:
    """Trim, reject empty, and silently truncate message text."""
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Empty message")
    return content.strip()[:max_length]


class ChatService:
    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.profiles = ProfileService(db)

    def list_messages(
        self, after_id: Optional[int] = None, limit: int = DEFAULT_LIMIT
    ) -> List[ChatMessage]:
        """Messages with id > after_id, ascending, at most MAX_LIMIT."""
        query = after_cursor(self.db.query(ChatMessage), ChatMessage.id, after_id)
        return query.limit(clamp_limit(limit, DEFAULT_LIMIT, MAX_LIMIT)).all()

    def send_message(self, identity_id: str, content: Any) -> ChatMessage:
        text = normalize_content(content, MAX_CONTENT_LENGTH)
        profile = self.profiles.require_username(identity_id)
        msg = ChatMessage(user_id=identity_id, username=profile.username, content=text)
        self.db.add(msg)
        self.db.commit()
        self.db.refresh(msg)
        return msg
