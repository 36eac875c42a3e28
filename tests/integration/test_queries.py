"""
Integration tests for the read-side affiliate queries.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from affiliate.repositories.filters import (
    CommissionListFilter,
    ProfileListFilter,
    WithdrawListFilter,
)
from tests.helpers import make_order


pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def active_affiliate(service, orders, affiliate):
    """Affiliate with two clicks and two paid orders (10.00 and 5.00)."""
    await service.track_click(affiliate.affiliate_code, visitor_key="a")
    await service.track_click(affiliate.affiliate_code, visitor_key="b")
    orders.add(make_order(500, buyer_id=2, amount="100.00", profile_id=affiliate.id))
    orders.add(make_order(501, buyer_id=3, amount="50.00", profile_id=affiliate.id))
    await service.handle_order_paid(500)
    await service.handle_order_paid(501)
    return affiliate


class TestDashboard:
    """Tests for the user affiliate center."""

    @pytest.mark.asyncio
    async def test_not_opened(self, service, enabled_program):
        dashboard = await service.get_user_dashboard(42)

        assert dashboard.opened is False
        assert dashboard.affiliate_code == ""
        assert dashboard.stats.click_count == 0

    @pytest.mark.asyncio
    async def test_opened_with_stats(self, service, active_affiliate):
        dashboard = await service.get_user_dashboard(1)

        assert dashboard.opened is True
        assert dashboard.affiliate_code == active_affiliate.affiliate_code
        assert dashboard.promotion_path == f"/?aff={active_affiliate.affiliate_code}"
        assert dashboard.stats.click_count == 2
        assert dashboard.stats.valid_order_count == 2
        assert dashboard.stats.conversion_rate == Decimal("100.00")
        assert dashboard.stats.available_commission == Decimal("15.00")
        assert dashboard.stats.pending_commission == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_attached_and_withdrawn_amounts(self, service, active_affiliate):
        """Attached rows leave 'available'; paid rows count as withdrawn."""
        request = await service.apply_withdraw(1, "10", "bank", "acct-1")

        attached = await service.get_profile_stats(active_affiliate.id)
        await service.review_withdraw(99, request.id, "pay")
        paid = await service.get_profile_stats(active_affiliate.id)

        assert attached.available_commission == Decimal("5.00")
        assert paid.available_commission == Decimal("5.00")
        assert paid.withdrawn_commission == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_canceled_orders_not_counted(self, service, active_affiliate):
        await service.handle_order_canceled(501)

        stats = await service.get_profile_stats(active_affiliate.id)

        assert stats.valid_order_count == 1
        assert stats.conversion_rate == Decimal("50.00")
        assert stats.available_commission == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_unknown_profile_stats(self, service, enabled_program):
        stats = await service.get_profile_stats(404)

        assert stats.click_count == 0
        assert stats.available_commission == Decimal("0.00")


class TestUserListings:
    """Tests for user commission and withdrawal listings."""

    @pytest.mark.asyncio
    async def test_commissions_newest_first(self, service, active_affiliate):
        page = await service.list_user_commissions(1, page=1, page_size=1)

        assert page.total == 2
        assert page.page_size == 1
        assert [row.order_id for row in page.items] == [501]

    @pytest.mark.asyncio
    async def test_commission_status_filter(self, service, active_affiliate):
        await service.handle_order_canceled(500)

        rejected = await service.list_user_commissions(1, status="rejected")

        assert rejected.total == 1
        assert rejected.items[0].order_id == 500

    @pytest.mark.asyncio
    async def test_user_without_profile(self, service, enabled_program):
        commissions = await service.list_user_commissions(42)
        withdraws = await service.list_user_withdraws(42, page=0, page_size=500)

        assert commissions.total == 0
        assert commissions.items == []
        assert (withdraws.page, withdraws.page_size) == (1, 100)

    @pytest.mark.asyncio
    async def test_withdraws(self, service, active_affiliate):
        await service.apply_withdraw(1, "5", "bank", "acct-1")
        await service.apply_withdraw(1, "5", "bank", "acct-2")

        page = await service.list_user_withdraws(1)

        assert page.total == 2
        assert [item.account for item in page.items] == ["acct-2", "acct-1"]


class TestAdminListings:
    """Tests for admin listings."""

    @pytest.mark.asyncio
    async def test_profiles_with_stats(self, service, users, active_affiliate):
        users.add(7)
        other = await service.open_affiliate(7)

        page = await service.list_admin_profiles()

        assert page.total == 2
        by_id = {item.profile.id: item.stats for item in page.items}
        assert by_id[active_affiliate.id].click_count == 2
        assert by_id[active_affiliate.id].available_commission == Decimal("15.00")
        assert by_id[other.id].click_count == 0
        assert by_id[other.id].valid_order_count == 0

    @pytest.mark.asyncio
    async def test_profile_filters(self, service, users, active_affiliate):
        users.add(7)
        await service.open_affiliate(7)

        by_code = await service.list_admin_profiles(
            ProfileListFilter(code=active_affiliate.affiliate_code.lower())
        )
        by_user = await service.list_admin_profiles(ProfileListFilter(user_id=7))

        assert [item.profile.user_id for item in by_code.items] == [1]
        assert [item.profile.user_id for item in by_user.items] == [7]

    @pytest.mark.asyncio
    async def test_commission_filters(self, service, active_affiliate):
        page = await service.list_admin_commissions(CommissionListFilter(order_id=500))

        assert page.total == 1
        assert page.items[0].commission_amount == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_withdraw_keyword(self, service, active_affiliate):
        await service.apply_withdraw(1, "5", "bank", "iban-DE001")
        await service.apply_withdraw(1, "5", "bank", "iban-FR002")

        page = await service.list_admin_withdraws(WithdrawListFilter(keyword="FR"))
        pending = await service.list_admin_withdraws(
            WithdrawListFilter(status="pending_review")
        )

        assert [item.account for item in page.items] == ["iban-FR002"]
        assert pending.total == 2
