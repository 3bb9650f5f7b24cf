"""
Account persistence — the only place that talks SQL about users.

Every method works inside the caller's ``AsyncSession``; committing is the
job of ``get_db_session`` (or of the caller when used outside a request).
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Account

logger = logging.getLogger(__name__)


class ConstraintViolation(Exception):
    """A write was rejected by a database uniqueness constraint."""


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


class AccountStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_username(self, username: str) -> Optional[Account]:
        result = await self.session.execute(
            select(Account).where(Account.username == username)
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str | uuid.UUID) -> Optional[Account]:
        return await self.session.get(Account, _to_uuid(user_id))

    async def insert(self, account: Account) -> None:
        """
        Persist ``account``.

        Raises ``ConstraintViolation`` when another row already holds the
        username; the surrounding transaction is rolled back in that case.
        """
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.info("Insert rejected for username %r: %s", account.username, exc.orig)
            raise ConstraintViolation(f"username {account.username!r} already exists") from exc

    async def delete(self, account: Account) -> None:
        await self.session.delete(account)
        await self.session.flush()

    async def count_all(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Account))
        return int(result.scalar_one())

    async def page_slice(self, offset: int, limit: int) -> List[Account]:
        """Newest accounts first; ``user_id`` breaks ``created_at`` ties."""
        result = await self.session.execute(
            select(Account)
            .order_by(Account.created_at.desc(), Account.user_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
