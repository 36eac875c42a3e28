"""
Integration tests for the click ledger and order attribution.

Covers:
- Click recording and ignored clicks
- Duplicate click suppression
- Last-touch attribution, code fallback and self-referral
"""

import pytest
from sqlalchemy import func, select

from affiliate.models import AffiliateClick


pytestmark = pytest.mark.integration


async def _click_count(session) -> int:
    result = await session.execute(select(func.count()).select_from(AffiliateClick))
    return result.scalar_one()


class TestTrackClick:
    """Tests for ClickTracker via AffiliateService.track_click."""

    @pytest.mark.asyncio
    async def test_click_recorded(self, service, session, affiliate):
        """Valid code records a click with clipped inputs."""
        click = await service.track_click(
            affiliate.affiliate_code.lower(),
            visitor_key=" visitor-1 ",
            landing_path="/landing",
            user_agent="x" * 2000,
        )

        assert click is not None
        assert click.affiliate_profile_id == affiliate.id
        assert click.visitor_key == "visitor-1"
        assert len(click.user_agent) == 1024
        assert await _click_count(session) == 1

    @pytest.mark.asyncio
    async def test_blank_and_unknown_codes_ignored(self, service, session, affiliate):
        assert await service.track_click("", visitor_key="v") is None
        assert await service.track_click("NOPE0000", visitor_key="v") is None
        assert await _click_count(session) == 0

    @pytest.mark.asyncio
    async def test_disabled_program_ignores_clicks(self, service, session, affiliate):
        await service.update_affiliate_setting({"enabled": False})

        assert await service.track_click(affiliate.affiliate_code, visitor_key="v") is None

    @pytest.mark.asyncio
    async def test_disabled_profile_ignores_clicks(self, service, session, affiliate):
        await service.update_profile_status(affiliate.id, "disabled")

        assert await service.track_click(affiliate.affiliate_code, visitor_key="v") is None

    @pytest.mark.asyncio
    async def test_repeat_click_suppressed(self, service, session, affiliate):
        """Same visitor, profile and path inside the window counts once."""
        first = await service.track_click(
            affiliate.affiliate_code, visitor_key="v", landing_path="/a"
        )
        second = await service.track_click(
            affiliate.affiliate_code, visitor_key="v", landing_path="/a"
        )

        assert first is not None
        assert second is None
        assert await _click_count(session) == 1

    @pytest.mark.asyncio
    async def test_other_path_is_recorded(self, service, session, affiliate):
        await service.track_click(affiliate.affiliate_code, visitor_key="v", landing_path="/a")
        other = await service.track_click(
            affiliate.affiliate_code, visitor_key="v", landing_path="/b"
        )

        assert other is not None
        assert await _click_count(session) == 2

    @pytest.mark.asyncio
    async def test_blank_path_matches_any_path(self, service, session, affiliate):
        await service.track_click(affiliate.affiliate_code, visitor_key="v", landing_path="/a")

        assert await service.track_click(affiliate.affiliate_code, visitor_key="v") is None

    @pytest.mark.asyncio
    async def test_anonymous_clicks_never_deduplicated(self, service, session, affiliate):
        await service.track_click(affiliate.affiliate_code, landing_path="/a")
        await service.track_click(affiliate.affiliate_code, landing_path="/a")

        assert await _click_count(session) == 2


class TestResolveAttribution:
    """Tests for AttributionResolver via the service facade."""

    @pytest.mark.asyncio
    async def test_visitor_click_wins(self, service, users, affiliate):
        await service.track_click(affiliate.affiliate_code, visitor_key="visitor")

        snapshot = await service.resolve_order_affiliate_snapshot(2, "", "visitor")

        assert snapshot.profile_id == affiliate.id
        assert snapshot.code == affiliate.affiliate_code

    @pytest.mark.asyncio
    async def test_last_touch_wins(self, service, users, affiliate):
        users.add(3)
        other = await service.open_affiliate(3)
        await service.track_click(affiliate.affiliate_code, visitor_key="visitor")
        await service.track_click(other.affiliate_code, visitor_key="visitor")

        snapshot = await service.resolve_order_affiliate_snapshot(2, "", "visitor")

        assert snapshot.profile_id == other.id

    @pytest.mark.asyncio
    async def test_click_beats_explicit_code(self, service, users, affiliate):
        users.add(3)
        other = await service.open_affiliate(3)
        await service.track_click(affiliate.affiliate_code, visitor_key="visitor")

        snapshot = await service.resolve_order_affiliate_snapshot(
            2, other.affiliate_code, "visitor"
        )

        assert snapshot.profile_id == affiliate.id

    @pytest.mark.asyncio
    async def test_code_fallback(self, service, affiliate):
        snapshot = await service.resolve_order_affiliate_snapshot(
            2, f"  {affiliate.affiliate_code.lower()} ", "unknown-visitor"
        )

        assert snapshot.profile_id == affiliate.id

    @pytest.mark.asyncio
    async def test_buyer_own_click_credits_nobody(self, service, users, affiliate):
        """A self click ends resolution even when another code is supplied."""
        users.add(3)
        other = await service.open_affiliate(3)
        await service.track_click(affiliate.affiliate_code, visitor_key="visitor")

        snapshot = await service.resolve_order_affiliate_snapshot(
            1, other.affiliate_code, "visitor"
        )

        assert snapshot.is_empty

    @pytest.mark.asyncio
    async def test_buyer_own_code_credits_nobody(self, service, affiliate):
        snapshot = await service.resolve_order_affiliate_snapshot(
            1, affiliate.affiliate_code, ""
        )

        assert snapshot.is_empty

    @pytest.mark.asyncio
    async def test_disabled_profile_code_credits_nobody(self, service, affiliate):
        await service.update_profile_status(affiliate.id, "disabled")

        snapshot = await service.resolve_order_affiliate_snapshot(
            2, affiliate.affiliate_code, ""
        )

        assert snapshot.is_empty

    @pytest.mark.asyncio
    async def test_disabled_program_credits_nobody(self, service, affiliate):
        await service.track_click(affiliate.affiliate_code, visitor_key="visitor")
        await service.update_affiliate_setting({"enabled": False})

        snapshot = await service.resolve_order_affiliate_snapshot(
            2, affiliate.affiliate_code, "visitor"
        )

        assert snapshot.is_empty
