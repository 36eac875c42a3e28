"""
Affiliate profile management.

Opening profiles for users and admin status changes.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.config.business_constants import AFFILIATE_CODE_MAX_RETRY
from affiliate.models.affiliate_profile import AffiliateProfile
from affiliate.models.enums import AffiliateProfileStatus
from affiliate.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from affiliate.services.affiliate.code_generator import generate_affiliate_code
from affiliate.services.base_service import BaseService, transaction
from affiliate.services.ports import AffiliateSettingProvider, UserLookup
from affiliate.utils.exceptions import (
    AffiliateDisabledError,
    CodeGenerationError,
    NotFoundError,
    ProfileStatusInvalidError,
    UserDisabledError,
)


def parse_profile_status(raw: str) -> AffiliateProfileStatus:
    """
    Parse admin-supplied profile status.

    Raises:
        ProfileStatusInvalidError: If status is not active/disabled
    """
    try:
        return AffiliateProfileStatus((raw or "").strip().lower())
    except ValueError as e:
        raise ProfileStatusInvalidError() from e


def normalize_profile_ids(profile_ids: list[int]) -> list[int]:
    """Drop non-positive IDs and duplicates, keeping first-seen order."""
    seen: set[int] = set()
    result: list[int] = []
    for profile_id in profile_ids:
        if profile_id <= 0 or profile_id in seen:
            continue
        seen.add(profile_id)
        result.append(profile_id)
    return result


class AffiliateProfileManager(BaseService):
    """Opens affiliate profiles and toggles their status."""

    def __init__(
        self,
        session: AsyncSession,
        setting_provider: AffiliateSettingProvider,
        user_lookup: UserLookup,
    ) -> None:
        """
        Initialize profile manager.

        Args:
            session: Database session
            setting_provider: Affiliate configuration source
            user_lookup: User collaborator
        """
        super().__init__(session)
        self.profile_repo = AffiliateProfileRepository(session)
        self.setting_provider = setting_provider
        self.user_lookup = user_lookup

    @transaction
    async def open_affiliate(self, user_id: int) -> AffiliateProfile:
        """
        Open affiliate profile for user.

        Returns the existing profile if the user already has one.

        Args:
            user_id: User ID

        Returns:
            Active or existing profile

        Raises:
            AffiliateDisabledError: Program is disabled
            NotFoundError: User does not exist
            UserDisabledError: User is disabled
            CodeGenerationError: No unique code after all retries
        """
        if user_id <= 0:
            raise UserDisabledError()

        setting = await self.setting_provider.get_affiliate_setting()
        if not setting.enabled:
            raise AffiliateDisabledError()

        user = await self.user_lookup.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_disabled:
            raise UserDisabledError()

        existing = await self.profile_repo.get_by_user_id(user_id)
        if existing:
            return existing

        for attempt in range(1, AFFILIATE_CODE_MAX_RETRY + 1):
            code = generate_affiliate_code()
            if await self.profile_repo.exists(affiliate_code=code):
                continue

            try:
                profile = await self.profile_repo.create(
                    user_id=user_id,
                    affiliate_code=code,
                    status=AffiliateProfileStatus.ACTIVE.value,
                )
            except IntegrityError:
                # Lost a race: either the code or the user's profile now exists
                await self.rollback()
                existing = await self.profile_repo.get_by_user_id(user_id)
                if existing:
                    return existing
                self.logger.warning(
                    "Affiliate code collision, retrying",
                    extra={"user_id": user_id, "attempt": attempt},
                )
                continue

            self.logger.info(
                "Affiliate profile opened",
                extra={
                    "user_id": user_id,
                    "profile_id": profile.id,
                    "affiliate_code": profile.affiliate_code,
                },
            )
            return profile

        raise CodeGenerationError()

    @transaction
    async def update_profile_status(
        self, profile_id: int, status: str
    ) -> AffiliateProfile:
        """
        Set status of one profile.

        Args:
            profile_id: Profile ID
            status: "active" or "disabled"

        Returns:
            Updated profile (unchanged if status was already set)
        """
        if profile_id <= 0:
            raise NotFoundError("Affiliate profile not found")
        next_status = parse_profile_status(status)

        profile = await self.profile_repo.get_by_id(profile_id)
        if profile is None:
            raise NotFoundError("Affiliate profile not found")
        if profile.status == next_status:
            return profile

        profile = await self.profile_repo.update(
            profile_id, for_update=True, status=next_status.value
        )

        self.logger.info(
            "Affiliate profile status changed",
            extra={"profile_id": profile_id, "status": next_status.value},
        )
        return profile

    @transaction
    async def batch_update_profile_status(
        self, profile_ids: list[int], status: str
    ) -> int:
        """
        Set status of many profiles.

        Args:
            profile_ids: Profile IDs; duplicates and non-positive IDs are ignored
            status: "active" or "disabled"

        Returns:
            Number of affected profiles
        """
        next_status = parse_profile_status(status)
        ids = normalize_profile_ids(profile_ids)
        if not ids:
            return 0

        affected = await self.profile_repo.batch_update_status(ids, next_status.value)

        self.logger.info(
            "Affiliate profile status batch changed",
            extra={"count": affected, "status": next_status.value},
        )
        return affected
