from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from jose import JWTError, jwt

from ..common.datetime_utils import now_utc
from ..common.validators import optional_text, require_max_length, require_non_empty, require_string_list
from ..core.constants import MAX_DIETARY_RESTRICTIONS, MAX_DISPLAY_NAME_LENGTH, MAX_PHONE_LENGTH
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class TokenIdentityProvider:
    """Use case: resolve a bearer credential to a user record.

    Tokens are JWTs signed by the identity provider with a shared secret. The
    ``sub`` claim is the user's uid; ``email``, ``name`` and ``phone_number``
    seed the profile the first time the uid is seen.
    """

    def __init__(
        self,
        users: UserRepository,
        *,
        secret: str,
        algorithms: Sequence[str] = ("HS256",),
        audience: Optional[str] = None,
        admin_emails: Iterable[str] = (),
        clock: Callable[[], datetime] | None = None,
    ):
        self._users = users
        self._secret = secret
        self._algorithms = list(algorithms)
        self._audience = audience or None
        self._admin_emails = {e.strip().lower() for e in admin_emails if e and e.strip()}
        self._clock = clock or now_utc

    def _decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as e:
            logger.warning("Token verification failed: %s", e)
            raise AuthenticationError("Unauthorized")

    def verify(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Unauthorized")

        claims = self._decode(token)
        uid = claims.get("sub")
        if not isinstance(uid, str) or not uid:
            logger.warning("Token without subject rejected")
            raise AuthenticationError("Unauthorized")

        now = self._clock()
        user = self._users.get_by_id(uid)
        if user:
            self._users.touch_last_login(uid, now)
            return replace(user, last_login_at=now)

        return self._register(uid, claims, now)

    def _register(self, uid: str, claims: dict, now: datetime) -> User:
        email = str(claims.get("email") or "").strip().lower()
        display_name = str(claims.get("name") or "").strip() or (email.split("@")[0] if email else uid)
        user = User(
            uid=uid,
            email=email,
            display_name=display_name[:MAX_DISPLAY_NAME_LENGTH],
            phone_number=claims.get("phone_number") or None,
            dietary_restrictions=[],
            is_admin=bool(email) and email in self._admin_emails,
            created_at=now,
            updated_at=now,
            last_login_at=now,
        )
        stored = self._users.create_user(user)
        if stored is user:
            logger.info("Registered new user %s (admin=%s)", uid, user.is_admin)
        return stored


class ProfileService:
    """Use case: read and edit one's own profile."""

    def __init__(self, users: UserRepository, *, clock: Callable[[], datetime] | None = None):
        self._users = users
        self._clock = clock or now_utc

    def get_profile(self, user: User) -> User:
        stored = self._users.get_by_id(user.uid)
        if not stored:
            raise NotFoundError("User not found")
        return stored

    def update_profile(
        self,
        user: User,
        *,
        display_name: Any,
        phone_number: Any = None,
        dietary_restrictions: Any = None,
    ) -> User:
        display_name = require_max_length(
            require_non_empty(display_name, "Display name"), "Display name", MAX_DISPLAY_NAME_LENGTH
        )
        phone = optional_text(phone_number, "Phone number", MAX_PHONE_LENGTH) or None
        restrictions = require_string_list(dietary_restrictions, "Dietary restrictions", MAX_DIETARY_RESTRICTIONS)
        if phone is not None and not all(c.isdigit() or c in "+-() ." for c in phone):
            raise ValidationError("Phone number contains invalid characters")

        self._users.update_profile(
            user.uid,
            display_name=display_name,
            phone_number=phone,
            dietary_restrictions=restrictions,
            updated_at=self._clock(),
        )
        return self.get_profile(user)
