from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class User:
    """Domain entity: a community member as known to this service.

    Created the first time a valid credential for ``uid`` is seen.
    """

    uid: str
    email: str
    display_name: str
    phone_number: Optional[str]
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime
    dietary_restrictions: List[str] = field(default_factory=list)
    is_admin: bool = False


@dataclass(frozen=True)
class UserSummary:
    """Minimal display info joined onto orders and attendance listings."""

    uid: str
    display_name: str
    email: str


UNKNOWN_USER_NAME = "Unknown User"
UNKNOWN_USER_EMAIL = "Unknown Email"


def summarize(user: Optional[User], uid: str) -> UserSummary:
    if user is None:
        return UserSummary(uid=uid, display_name=UNKNOWN_USER_NAME, email=UNKNOWN_USER_EMAIL)
    return UserSummary(uid=user.uid, display_name=user.display_name or UNKNOWN_USER_NAME, email=user.email)
