"""Profile read/create, username policy and field updates."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from plaza.exceptions import ConflictError, NotFoundError, ValidationError
from plaza.infra.logging_config import get_logger
from plaza.models.profile import Profile

logger = get_logger("services.profile")

USERNAME_RE = re.compile(r"[A-Za-z0-9_]{3,20}")
PROFILE_FIELDS = ("age", "gender", "address", "occupation", "motivation")
LONG_TEXT_FIELDS = ("address", "occupation", "motivation")
MAX_AGE = 130
MAX_GENDER_LENGTH = 30
MAX_LONG_TEXT_LENGTH = 500


def _coerce_age(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError("Invalid age")
    if isinstance(value, str):
        value = value.strip()
        try:
            value = float(value)
        except ValueError as e:
            raise ValidationError("Invalid age") from e
    if not isinstance(value, (int, float)):
        raise ValidationError("Invalid age")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError("Invalid age")
        value = int(value)
    if value < 0 or value > MAX_AGE:
        raise ValidationError("Invalid age")
    return value


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


class ProfileService:
    """Manages profiles keyed by identity id."""

    def __init__(self, db: DBSession) -> None:
        self.db = db

    def get_by_id(self, identity_id: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.id == identity_id).first()

    def find_by_username(self, username: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.username == username).first()

    def ensure_profile(self, identity_id: str) -> Profile:
        """
        Return the profile for identity_id, creating a bare one if absent.

        Concurrent first access can race on the insert; the loser's duplicate-key
        failure is treated as "already created" and the row is re-read.
        """
        profile = self.get_by_id(identity_id)
        if profile is not None:
            return profile
        profile = Profile(id=identity_id)
        self.db.add(profile)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Profile %s created concurrently; re-reading", identity_id)
            profile = self.get_by_id(identity_id)
            if profile is None:
                raise
            return profile
        self.db.refresh(profile)
        return profile

    def set_username(self, identity_id: str, candidate: Any) -> Profile:
        """Validate, check uniqueness, and store the caller's username."""
        if not isinstance(candidate, str) or not USERNAME_RE.fullmatch(candidate):
            raise ValidationError("Invalid username (3-20 alphanumeric or _ )")
        existing = self.find_by_username(candidate)
        if existing is not None and existing.id != identity_id:
            raise ConflictError("Username taken")

        profile = self.ensure_profile(identity_id)
        profile.username = candidate
        try:
            self.db.commit()
        except IntegrityError as e:
            # Another caller claimed the name between our check and commit.
            self.db.rollback()
            raise ConflictError("Username taken") from e
        self.db.refresh(profile)
        return profile

    def get_profile(
        self,
        identity_id: Optional[str] = None,
        username: Optional[str] = None,
    ) -> Profile:
        """Caller's own profile by identity, or a public lookup by username."""
        if (identity_id is None) == (username is None):
            raise ValidationError("Provide exactly one of identity or username")
        if identity_id is not None:
            return self.ensure_profile(identity_id)
        profile = self.find_by_username(username)
        if profile is None:
            raise NotFoundError("Not found")
        return profile

    def update_profile(self, identity_id: str, patch: Any) -> Profile:
        """
        Apply an allow-listed patch to the caller's profile.

        Keys outside PROFILE_FIELDS are dropped. Every value is validated before
        anything is written.
        """
        if not isinstance(patch, dict):
            raise ValidationError("Missing patch")
        allowed: Dict[str, Any] = {k: patch[k] for k in PROFILE_FIELDS if k in patch}
        if not allowed:
            raise ValidationError("No valid fields")

        if "age" in allowed:
            allowed["age"] = _coerce_age(allowed["age"])
        if "gender" in allowed:
            allowed["gender"] = _optional_text(allowed["gender"])
            if allowed["gender"] and len(allowed["gender"]) > MAX_GENDER_LENGTH:
                raise ValidationError("Gender too long")
        for name in LONG_TEXT_FIELDS:
            if name in allowed:
                allowed[name] = _optional_text(allowed[name])
                if allowed[name] and len(allowed[name]) > MAX_LONG_TEXT_LENGTH:
                    raise ValidationError(f"{name} too long")

        profile = self.ensure_profile(identity_id)
        for key, value in allowed.items():
            setattr(profile, key, value)
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def require_username(
        self, identity_id: str, message: str = "Username not set"
    ) -> Profile:
        """Ensure the caller's profile and fail unless it has a username."""
        profile = self.ensure_profile(identity_id)
        if not profile.username:
            raise ValidationError(message)
        return profile
