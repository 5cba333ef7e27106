"""Thread and ThreadMessage models for two-party direct messages."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from plaza.db import Base
from plaza.models.mixins import BigIntId, CreatedAtMixin


class Thread(Base, CreatedAtMixin):
    """
    Conversation between user_a and user_b, where user_a_id < user_b_id.

    At most one thread per (pair, listing_id); a NULL listing_id is its own key,
    so the general thread and each per-listing thread coexist.
    """

    __tablename__ = "threads"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_a_id = Column(String(64), nullable=False, index=True)
    user_b_id = Column(String(64), nullable=False, index=True)
    user_a_username = Column(String(20), nullable=True)
    user_b_username = Column(String(20), nullable=True)
    listing_id = Column(
        BigIntId,
        ForeignKey("listings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    messages = relationship(
        "ThreadMessage",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="ThreadMessage.id",
    )

    __table_args__ = (
        CheckConstraint("user_a_id < user_b_id", name="ck_threads_pair_order"),
        Index(
            "ux_threads_pair_general",
            "user_a_id",
            "user_b_id",
            unique=True,
            postgresql_where=listing_id.is_(None),
            sqlite_where=listing_id.is_(None),
        ),
        Index(
            "ux_threads_pair_listing",
            "user_a_id",
            "user_b_id",
            "listing_id",
            unique=True,
            postgresql_where=listing_id.isnot(None),
            sqlite_where=listing_id.isnot(None),
        ),
    )

    def has_member(self, identity_id: str) -> bool:
        return identity_id in (self.user_a_id, self.user_b_id)

    def username_for(self, identity_id: str) -> str | None:
        """Stored display name of the participant in identity_id's slot."""
        if identity_id == self.user_a_id:
            return self.user_a_username
        return self.user_b_username


class ThreadMessage(Base, CreatedAtMixin):
    """One row per DM. sender_username is copied from the thread slot."""

    __tablename__ = "thread_messages"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    thread_id = Column(
        BigIntId,
        ForeignKey("threads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id = Column(String(64), nullable=False)
    sender_username = Column(String(20), nullable=True)
    content = Column(Text, nullable=False)

    thread = relationship("Thread", back_populates="messages")
