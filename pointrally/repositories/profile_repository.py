from typing import Iterable, Optional

from sqlalchemy.orm import Session

from pointrally.models.profile import Profile as ProfileModel
from pointrally.repositories.base import BaseRepository
from pointrally.schemas.profile import ProfileResponse


class ProfileRepository(BaseRepository[ProfileModel, ProfileResponse]):
    """프로필 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(ProfileModel, ProfileResponse, db)

    def get_by_email(self, email: str) -> Optional[ProfileResponse]:
        return self.get_by_field("email", email.strip().lower())

    def lock(self, user_ids: Iterable[str]) -> None:
        """프로필 행을 SELECT ... FOR UPDATE 로 잠금

        데드락을 피하기 위해 항상 id 오름차순으로 잠근다.
        SQLite 는 FOR UPDATE 를 무시하고 쓰기를 직렬화한다.
        """
        ordered_ids = sorted(set(user_ids))
        (
            self.db.query(self.model_class)
            .filter(self.model_class.id.in_(ordered_ids))
            .order_by(self.model_class.id)
            .with_for_update()
            .populate_existing()
            .all()
        )

    def delete_profile(self, user_id: str, commit: bool = True) -> bool:
        """프로필 삭제 - ORM cascade 로 연결 팀/원장/교환 내역도 함께 삭제"""
        return self.delete(user_id, commit=commit)
