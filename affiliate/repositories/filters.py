"""
List filters and pagination for affiliate listings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from affiliate.config.business_constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


T = TypeVar("T")


def normalize_pagination(page: int | None, page_size: int | None) -> tuple[int, int]:
    """
    Clamp pagination input.

    Page below 1 becomes 1; a missing or non-positive page size becomes
    the default; page size is capped at MAX_PAGE_SIZE.
    """
    page = page if page and page > 0 else 1
    if not page_size or page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return page, min(page_size, MAX_PAGE_SIZE)


@dataclass
class Page(Generic[T]):
    """One page of a listing."""

    items: list[T]
    total: int
    page: int
    page_size: int


@dataclass
class ProfileListFilter:
    """Admin profile listing filter."""

    user_id: int | None = None
    code: str = ""
    status: str = ""


@dataclass
class CommissionListFilter:
    """Commission listing filter."""

    profile_id: int | None = None
    order_id: int | None = None
    status: str = ""
    created_from: datetime | None = None
    created_to: datetime | None = None


@dataclass
class WithdrawListFilter:
    """Withdrawal listing filter; keyword matches the payout account."""

    profile_id: int | None = None
    status: str = ""
    keyword: str = ""
    created_from: datetime | None = None
    created_to: datetime | None = None
