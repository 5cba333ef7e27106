"""Direct messages: thread resolution, membership checks and message feeds."""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from plaza.exceptions import AuthorizationError, NotFoundError, ValidationError
from plaza.infra.logging_config import get_logger
from plaza.models.thread import Thread, ThreadMessage
from plaza.services.chat_service import normalize_content
from plaza.services.listing_service import ListingService
from plaza.services.profile_service import ProfileService
from plaza.utils.pagination import after_cursor, clamp_limit

logger = get_logger("services.dm")

DEFAULT_LIMIT = 50
MAX_LIMIT = 200
MAX_CONTENT_LENGTH = 1000


def order_pair(a: str, b: str) -> Tuple[str, str]:
    """Canonical participant order: lower identity first."""
    return (a, b) if a < b else (b, a)


class DirectMessageService:
    """
    Two-party threads, optionally scoped to a listing.

    A thread is keyed by its ordered participant pair plus listing_id, where
    "no listing" is a distinct key. Threads are created on first contact and
    never closed.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.profiles = ProfileService(db)
        self.listings = ListingService(db)

    def start_dm(
        self,
        identity_id: str,
        target_username: Optional[str] = None,
        listing_id: Optional[int] = None,
    ) -> Thread:
        """Return the caller's thread with the target, creating it if needed."""
        me = self.profiles.require_username(identity_id, "Set your username first")
        if (target_username is None) == (listing_id is None):
            raise ValidationError("Provide exactly one of target_username or listing_id")

        if listing_id is not None:
            # Resolve by owner id; the listing's username may be stale.
            listing = self.listings.get_listing(listing_id)
            owner = self.profiles.ensure_profile(listing.user_id)
            target_id = owner.id
            target_name = owner.username or listing.username
        else:
            target = self.profiles.find_by_username(str(target_username))
            if target is None:
                raise NotFoundError("User not found")
            target_id, target_name = target.id, target.username

        if target_id == identity_id:
            raise ValidationError("Cannot message yourself")

        a, b = order_pair(identity_id, target_id)
        existing = self._find_thread(a, b, listing_id)
        if existing is not None:
            return existing

        names = {identity_id: me.username, target_id: target_name}
        thread = Thread(
            user_a_id=a,
            user_b_id=b,
            user_a_username=names[a],
            user_b_username=names[b],
            listing_id=listing_id,
        )
        self.db.add(thread)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._find_thread(a, b, listing_id)
            if existing is None:
                raise
            logger.info("Thread %s/%s/%s created concurrently", a, b, listing_id)
            return existing
        self.db.refresh(thread)
        logger.info("Created thread %s (listing=%s)", thread.id, listing_id)
        return thread

    def get_thread(self, identity_id: str, thread_id: int) -> Thread:
        """Fetch a thread the caller participates in."""
        thread = self.db.query(Thread).filter(Thread.id == thread_id).first()
        # Unknown ids get the same answer as foreign ones.
        if thread is None or not thread.has_member(identity_id):
            raise AuthorizationError("Not a member of this thread")
        return thread

    def list_messages(
        self,
        identity_id: str,
        thread_id: int,
        after_id: Optional[int] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> List[ThreadMessage]:
        thread = self.get_thread(identity_id, thread_id)
        query = self.db.query(ThreadMessage).filter(
            ThreadMessage.thread_id == thread.id
        )
        query = after_cursor(query, ThreadMessage.id, after_id)
        return query.limit(clamp_limit(limit, DEFAULT_LIMIT, MAX_LIMIT)).all()

    def send_message(
        self, identity_id: str, thread_id: int, content: Any
    ) -> ThreadMessage:
        """Append a message; the sender name comes from the thread's snapshot."""
        text = normalize_content(content, MAX_CONTENT_LENGTH)
        thread = self.get_thread(identity_id, thread_id)
        msg = ThreadMessage(
            thread_id=thread.id,
            sender_id=identity_id,
            sender_username=thread.username_for(identity_id),
            content=text,
        )
        self.db.add(msg)
        self.db.commit()
        self.db.refresh(msg)
        return msg

    def list_threads(
        self,
        identity_id: str,
        listing_id: Optional[int] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Thread]:
        """Threads the caller is part of, newest first."""
        query = self.db.query(Thread).filter(
            or_(Thread.user_a_id == identity_id, Thread.user_b_id == identity_id)
        )
        if listing_id is not None:
            query = query.filter(Thread.listing_id == listing_id)
        return (
            query.order_by(Thread.id.desc())
            .limit(clamp_limit(limit, DEFAULT_LIMIT, MAX_LIMIT))
            .all()
        )

    def _find_thread(
        self, user_a_id: str, user_b_id: str, listing_id: Optional[int]
    ) -> Optional[Thread]:
        query = self.db.query(Thread).filter(
            Thread.user_a_id == user_a_id, Thread.user_b_id == user_b_id
        )
        if listing_id is None:
            query = query.filter(Thread.listing_id.is_(None))
        else:
            query = query.filter(Thread.listing_id == listing_id)
        return query.first()
