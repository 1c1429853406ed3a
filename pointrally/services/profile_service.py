import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pointrally.core.exceptions import (
    ConflictError,
    InternalServerError,
    InvalidInputError,
    NotFoundError,
)
from pointrally.core.ledger import TierEnum
from pointrally.repositories.profile_repository import ProfileRepository
from pointrally.repositories.team_repository import UserTeamRepository
from pointrally.schemas.profile import (
    PROFILE_UPDATABLE_FIELDS,
    ProfileDetailResponse,
    ProfileResponse,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """사용자 프로필 서비스"""

    def __init__(self, db: Session):
        self.db = db
        self.profile_repo = ProfileRepository(db)
        self.user_team_repo = UserTeamRepository(db)

    def create_profile(
        self, user_id: str, email: str, display_name: Optional[str] = None
    ) -> ProfileResponse:
        """가입 직후 프로필 생성 (bronze, 0 포인트)"""
        if self.profile_repo.get_by_id(user_id) is not None:
            raise ConflictError("Profile already exists")

        normalized_email = email.strip().lower()
        if self.profile_repo.get_by_email(normalized_email) is not None:
            raise ConflictError("Email already registered")

        try:
            profile = self.profile_repo.create(
                id=user_id,
                email=normalized_email,
                display_name=display_name or normalized_email.split("@")[0],
                total_points=0,
                tier=TierEnum.BRONZE,
                preferences={},
            )
        except IntegrityError:
            raise ConflictError("Profile already exists")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create profile for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to create profile")

        logger.info(f"Created profile for user {user_id}")
        return profile

    def get_profile(self, user_id: str) -> ProfileDetailResponse:
        profile = self.profile_repo.get_by_id(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")

        return ProfileDetailResponse(
            **profile.model_dump(),
            connected_teams=self.user_team_repo.count_connections(user_id),
        )

    def get_profile_by_email(self, email: str) -> Optional[ProfileResponse]:
        return self.profile_repo.get_by_email(email)

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> ProfileResponse:
        """허용 필드(display_name, photo_url, bio, preferences)만 반영"""
        values = {
            key: value
            for key, value in updates.items()
            if key in PROFILE_UPDATABLE_FIELDS
        }
        if not values:
            raise InvalidInputError("No valid fields to update")

        try:
            profile = self.profile_repo.update(user_id, **values)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update profile for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to update profile")

        if profile is None:
            raise NotFoundError("Profile not found")

        logger.info(f"Updated profile for user {user_id}: {sorted(values)}")
        return profile

    def delete_profile(self, user_id: str) -> bool:
        """프로필과 연결 팀/거래/교환 내역 삭제"""
        try:
            deleted = self.profile_repo.delete_profile(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete profile for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to delete profile")

        if not deleted:
            raise NotFoundError("Profile not found")

        logger.info(f"Deleted profile for user {user_id}")
        return True
