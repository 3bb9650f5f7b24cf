"""
Paginated user listing.

Pages are 1-based and ordered newest account first.  Out-of-range paging
input is reset rather than rejected: a page below 1 becomes 1, a page size
outside ``1..max_page_size`` becomes the default size (it is not clamped).
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Optional, Tuple

from database.accounts import AccountStore
from utils.schemas import PaginatedResponse, PaginationMetadata, UserOut

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_page_params(
    page_number: Any,
    items_per_page: Any,
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> Tuple[int, int]:
    page = _as_int(page_number)
    if page is None or page < 1:
        page = 1

    size = _as_int(items_per_page)
    if size is None or size < 1 or size > max_page_size:
        size = default_page_size

    return page, size


class UserService:
    def __init__(
        self,
        store: AccountStore,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        self.store = store
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    async def list_users(self, page_number: Any = 1, items_per_page: Any = DEFAULT_PAGE_SIZE) -> PaginatedResponse[UserOut]:
        page, size = normalize_page_params(
            page_number,
            items_per_page,
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
        )

        total_items = await self.store.count_all()
        offset = (page - 1) * size
        # Past the last row; also keeps huge offsets away from the database.
        rows = await self.store.page_slice(offset, size) if offset < total_items else []

        total_pages = max(1, math.ceil(total_items / size))
        logger.debug("Listing users page=%d size=%d total=%d", page, size, total_items)

        return PaginatedResponse[UserOut](
            data=[UserOut.model_validate(row) for row in rows],
            pagination=PaginationMetadata(
                total_items=total_items,
                current_page=page,
                total_pages=total_pages,
                items_per_page=size,
                has_next_page=total_items > 0 and page < total_pages,
                has_previous_page=total_items > 0 and page > 1,
            ),
        )

    async def get_user(self, user_id: uuid.UUID) -> Optional[UserOut]:
        account = await self.store.find_by_id(user_id)
        return UserOut.model_validate(account) if account is not None else None
