"""
Tests for the paginated user listing.
"""

import uuid

import pytest

from conftest import BASE_TIME, make_account, seed_accounts
from users.service import UserService, normalize_page_params


class TestNormalizePageParams:
    @pytest.mark.parametrize(
        "page, size, expected",
        [
            (1, 10, (1, 10)),
            (3, 25, (3, 25)),
            (0, 10, (1, 10)),
            (-4, 10, (1, 10)),
            (2, 0, (2, 10)),
            (2, -1, (2, 10)),
            (2, 100, (2, 100)),
            (2, 101, (2, 10)),
            (2, 1000, (2, 10)),
            ("3", "5", (3, 5)),
            ("abc", "xyz", (1, 10)),
            (None, None, (1, 10)),
            (True, True, (1, 10)),
        ],
    )
    def test_defaults_and_resets(self, page, size, expected):
        assert normalize_page_params(page, size) == expected

    def test_custom_limits(self):
        assert normalize_page_params(1, 60, default_page_size=20, max_page_size=50) == (1, 20)


class TestListUsers:
    @pytest.mark.asyncio
    async def test_empty(self, store):
        page = await UserService(store).list_users(1, 10)

        assert page.data == []
        assert page.pagination.total_items == 0
        assert page.pagination.total_pages == 1
        assert page.pagination.has_next_page is False
        assert page.pagination.has_previous_page is False

    @pytest.mark.asyncio
    async def test_first_page_of_many(self, store):
        accounts = await seed_accounts(store, 25)
        page = await UserService(store).list_users(1, 10)

        assert len(page.data) == 10
        assert page.data[0].username == accounts[-1].username
        assert page.pagination.total_items == 25
        assert page.pagination.total_pages == 3
        assert page.pagination.current_page == 1
        assert page.pagination.items_per_page == 10
        assert page.pagination.has_next_page is True
        assert page.pagination.has_previous_page is False

    @pytest.mark.asyncio
    async def test_last_partial_page(self, store):
        accounts = await seed_accounts(store, 25)
        page = await UserService(store).list_users(3, 10)

        assert [u.username for u in page.data] == [a.username for a in reversed(accounts[:5])]
        assert page.pagination.has_next_page is False
        assert page.pagination.has_previous_page is True

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, store):
        await seed_accounts(store, 5)
        page = await UserService(store).list_users(4, 2)

        assert page.data == []
        assert page.pagination.current_page == 4
        assert page.pagination.total_pages == 3
        assert page.pagination.has_next_page is False
        assert page.pagination.has_previous_page is True

    @pytest.mark.asyncio
    async def test_page_zero_same_as_page_one(self, store):
        await seed_accounts(store, 12)
        service = UserService(store)
        assert (await service.list_users(0, 10)) == (await service.list_users(1, 10))

    @pytest.mark.asyncio
    async def test_oversized_page_size_resets_to_default(self, store):
        await seed_accounts(store, 15)
        page = await UserService(store).list_users(1, 1000)

        assert page.pagination.items_per_page == 10
        assert len(page.data) == 10

    @pytest.mark.asyncio
    async def test_same_timestamp_ordered_by_id(self, store):
        low = make_account("low", user_id=uuid.UUID(int=1), created_at=BASE_TIME)
        high = make_account("high", user_id=uuid.UUID(int=2), created_at=BASE_TIME)
        await store.insert(low)
        await store.insert(high)

        page = await UserService(store).list_users(1, 10)
        assert [u.username for u in page.data] == ["high", "low"]

    @pytest.mark.asyncio
    async def test_password_hash_never_exposed(self, store):
        await seed_accounts(store, 2)
        page = await UserService(store).list_users(1, 10)

        dumped = page.model_dump(by_alias=True)
        for user in dumped["data"]:
            assert "passwordHash" not in user
            assert "password_hash" not in user
        assert set(dumped["pagination"]) == {
            "totalItems", "currentPage", "totalPages",
            "itemsPerPage", "hasNextPage", "hasPreviousPage",
        }


class TestGetUser:
    @pytest.mark.asyncio
    async def test_found(self, store):
        account = make_account("dave", name="Dave")
        await store.insert(account)

        user = await UserService(store).get_user(account.user_id)
        assert user.username == "dave"
        assert user.name == "Dave"

    @pytest.mark.asyncio
    async def test_missing(self, store):
        assert await UserService(store).get_user(uuid.uuid4()) is None
