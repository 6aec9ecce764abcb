from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, uid: str) -> Optional[User]:
        raise NotImplementedError

    def get_many(self, uids: Iterable[str]) -> Dict[str, User]:
        raise NotImplementedError

    def create_user(self, user: User) -> User:
        """Insert ``user``; if the uid already exists return the stored record instead."""

        raise NotImplementedError

    def touch_last_login(self, uid: str, at: datetime) -> None:
        raise NotImplementedError

    def update_profile(
        self,
        uid: str,
        *,
        display_name: str,
        phone_number: Optional[str],
        dietary_restrictions: List[str],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError
