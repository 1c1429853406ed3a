from typing import List, Optional

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pointrally.core.ledger import TierEnum
from pointrally.models.base import BaseModel, JSONType


class Profile(BaseModel):
    """
    사용자 프로필 - 인증 제공자의 사용자 ID를 그대로 기본 키로 사용

    total_points / tier 는 user_teams.points_balance 합계로부터 파생된 캐시이며
    포인트 변동 시마다 서비스 계층에서 다시 계산됩니다.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferences: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tier: Mapped[TierEnum] = mapped_column(
        Enum(
            TierEnum,
            name="tier",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=TierEnum.BRONZE,
        nullable=False,
    )

    # 프로필 삭제 시 연결 팀/원장/교환 내역도 함께 삭제
    user_teams: Mapped[List["UserTeam"]] = relationship(  # noqa: F821
        back_populates="profile", cascade="all, delete-orphan"
    )
    transactions: Mapped[List["PointsTransaction"]] = relationship(  # noqa: F821
        cascade="all, delete-orphan"
    )
    redemptions: Mapped[List["Redemption"]] = relationship(  # noqa: F821
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email}, tier={self.tier})>"
