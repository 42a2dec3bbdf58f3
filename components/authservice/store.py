from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List, Optional

from .contracts import NewUser, UserRecord, UserStorePort
from .errors import DuplicateUserError

logger = logging.getLogger("authservice.store")


class InMemoryUserStore(UserStorePort):
    """Thread-safe in-memory user store with coarse-grained lock.

    Uniqueness of email and username key is enforced inside `create`, and the
    token version bump is a single locked read-modify-write. For single-process
    dev/testing; a database adapter must provide the same guarantees with a
    unique index and an atomic increment.
    """

    def __init__(self):
        self._by_id: Dict[str, UserRecord] = {}
        self._id_by_email: Dict[str, str] = {}
        self._id_by_username_key: Dict[str, str] = {}
        self._lock = threading.RLock()

    async def find_by_email_or_username_key(self, email: str, username_key: str) -> Optional[UserRecord]:
        with self._lock:
            # email match wins when both could match different records
            user_id = self._id_by_email.get(email) or self._id_by_username_key.get(username_key)
            return self._by_id.get(user_id) if user_id else None

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            return self._by_id.get(user_id)

    async def create(self, fields: NewUser) -> UserRecord:
        with self._lock:
            if fields.email in self._id_by_email:
                raise DuplicateUserError("email")
            if fields.username_key in self._id_by_username_key:
                raise DuplicateUserError("username")
            record = UserRecord(
                id=uuid.uuid4().hex,
                email=fields.email,
                username=fields.username,
                username_key=fields.username_key,
                password_hash=fields.password_hash,
                token_version=0,
            )
            self._by_id[record.id] = record
            self._id_by_email[record.email] = record.id
            self._id_by_username_key[record.username_key] = record.id
            logger.debug("user.created user_id=%s", record.id)
            return record

    async def increment_token_version(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            current = self._by_id.get(user_id)
            if current is None:
                return None
            updated = current.model_copy(update={"token_version": current.token_version + 1})
            self._by_id[user_id] = updated
            return updated

    async def list_users(self) -> List[UserRecord]:
        with self._lock:
            return list(self._by_id.values())
