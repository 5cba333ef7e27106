"""ChatMessage model: one row per message in the global chat room."""

from __future__ import annotations

from sqlalchemy import Column, String, Text

from plaza.db import Base
from plaza.models.mixins import BigIntId, CreatedAtMixin


class ChatMessage(Base, CreatedAtMixin):
    """Append-only. username is a snapshot of the author's name at write time."""

    __tablename__ = "chat_messages"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    username = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
