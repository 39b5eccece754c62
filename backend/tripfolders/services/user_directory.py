"""
TripFolders Backend — User Directory
=====================================

What:  Resolves identity tokens to user records and answers user lookups.
Why:   Accounts are registered and signed in by a separate account service.
       This application only needs to know *who* is asking and to find
       other users to add to a folder.
How:   Tokens are JWTs (python-jose, HS256) whose `sub` claim is the user
       id. Verification and resolution are separate steps so the rest of
       the app can depend on either.

Operations:
    verify(token)           → user id          | AuthError
    resolve(db, user_id)    → User             | AuthError
    find_by_username(db, n) → User | None
    search(db, requester, q)→ [User]           (add-member candidates)
    usernames_for(db, ids)  → [str]            ("" for unknown ids)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tripfolders.config import settings
from tripfolders.exceptions import AuthError, DatabaseError
from tripfolders.models import User
from tripfolders.services.folder_store import escape_like

logger = logging.getLogger(__name__)

# Candidate lists are for a picker, not a directory dump
SEARCH_LIMIT = 50


def create_access_token(
    user_id: uuid.UUID, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Issue a token the directory will accept.

    The account service signs tokens the same way; tests and local tooling
    use this helper.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


class UserDirectory:
    """Read-only view of the account store plus token verification."""

    def verify(self, token: Optional[str]) -> uuid.UUID:
        """
        Check a token and return the user id it was issued for.

        Raises:
            AuthError: missing, malformed, badly signed, or expired token
        """
        if not token:
            raise AuthError()
        try:
            payload = jwt.decode(
                token, settings.secret_key, algorithms=[settings.jwt_algorithm]
            )
        except ExpiredSignatureError:
            raise AuthError("Your session has expired. Please log in again.")
        except JWTError as e:
            logger.warning("Rejected identity token: %s", str(e))
            raise AuthError("Invalid session. Please log in again.")

        subject = payload.get("sub")
        try:
            return uuid.UUID(str(subject))
        except (TypeError, ValueError):
            raise AuthError("Invalid session. Please log in again.")

    async def resolve(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        """
        Load the account a verified token belongs to.

        Raises:
            AuthError: the account no longer exists
        """
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error resolving user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})
        if user is None:
            raise AuthError("Account not found. Please log in again.")
        return user

    async def authenticate(self, db: AsyncSession, token: Optional[str]) -> User:
        return await self.resolve(db, self.verify(token))

    async def find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up username: %s", str(e))
            raise DatabaseError(context={"username": username})

    async def search(
        self, db: AsyncSession, requester: User, query: Optional[str] = None
    ) -> List[User]:
        """
        Users that `requester` could add to a folder.

        Shared (non-private) accounts other than the requester, optionally
        narrowed to usernames containing `query` (case-insensitive),
        alphabetical.
        """
        statement = select(User).where(
            User.is_private.is_(False),
            User.id != requester.id,
        )
        if query and query.strip():
            needle = escape_like(query.strip())
            statement = statement.where(User.username.ilike(f"%{needle}%", escape="\\"))
        statement = statement.order_by(User.username).limit(SEARCH_LIMIT)

        try:
            result = await db.execute(statement)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error searching users: %s", str(e))
            raise DatabaseError(context={"query": query})

    async def usernames_for(
        self, db: AsyncSession, user_ids: Iterable[uuid.UUID]
    ) -> List[str]:
        """Usernames in the same order as `user_ids`; "" where an id is unknown."""
        ids = list(user_ids)
        if not ids:
            return []
        try:
            result = await db.execute(select(User).where(User.id.in_(ids)))
        except SQLAlchemyError as e:
            logger.error("Database error resolving %d usernames: %s", len(ids), str(e))
            raise DatabaseError(context={"user_count": len(ids)})
        by_id = {u.id: u.username for u in result.scalars().all()}
        return [by_id.get(user_id, "") for user_id in ids]


# ── Singleton Instance ────────────────────────────────────────────────────
user_directory = UserDirectory()
