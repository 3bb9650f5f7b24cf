"""
Shared fixtures: an in-memory AccountStore and a TokenService with a test secret.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from auth.jwt import TokenService
from auth.password import hash_password
from database.accounts import ConstraintViolation
from database.models import Account

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryAccountStore:
    """Same interface as ``database.accounts.AccountStore``, backed by a dict."""

    def __init__(self):
        self.by_id: Dict[uuid.UUID, Account] = {}

    async def find_by_username(self, username: str) -> Optional[Account]:
        return next((a for a in self.by_id.values() if a.username == username), None)

    async def find_by_id(self, user_id) -> Optional[Account]:
        if isinstance(user_id, str):
            user_id = uuid.UUID(user_id)
        return self.by_id.get(user_id)

    async def insert(self, account: Account) -> None:
        if any(a.username == account.username for a in self.by_id.values()):
            raise ConstraintViolation(account.username)
        self.by_id[account.user_id] = account

    async def delete(self, account: Account) -> None:
        self.by_id.pop(account.user_id, None)

    async def count_all(self) -> int:
        return len(self.by_id)

    async def page_slice(self, offset: int, limit: int) -> List[Account]:
        ordered = sorted(
            self.by_id.values(),
            key=lambda a: (a.created_at, a.user_id),
            reverse=True,
        )
        return ordered[offset:offset + limit]


def make_account(
    username: str = "alice",
    password: str = "secret123",
    created_at: Optional[datetime] = None,
    **extra,
) -> Account:
    created = created_at or BASE_TIME
    return Account(
        user_id=extra.pop("user_id", uuid.uuid4()),
        username=username,
        password_hash=hash_password(password),
        created_at=created,
        updated_at=created,
        **extra,
    )


async def seed_accounts(store: InMemoryAccountStore, count: int) -> List[Account]:
    """``user000`` … with one-minute spacing; the last one is the newest."""
    accounts = []
    for i in range(count):
        account = make_account(f"user{i:03d}", created_at=BASE_TIME + timedelta(minutes=i))
        await store.insert(account)
        accounts.append(account)
    return accounts


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)
