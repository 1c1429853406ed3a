import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.schema import UniqueConstraint

from pointrally.models.base import (
    Base,
    BaseModel,
    CreatedAtMixin,
    JSONType,
    new_uuid,
    utcnow,
)


class SportEnum(str, enum.Enum):
    NBA = "NBA"
    NFL = "NFL"
    MLB = "MLB"
    NHL = "NHL"
    MLS = "MLS"


class Team(Base, CreatedAtMixin):
    """팀 카탈로그 (참조 데이터)"""

    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    sport: Mapped[SportEnum] = mapped_column(
        Enum(SportEnum, name="sport", native_enum=False), nullable=False
    )
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    primary_color: Mapped[str] = mapped_column(String(20), nullable=False)
    secondary_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    api_endpoint: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class UserTeam(BaseModel):
    """
    사용자-팀 연결 - (user_id, team_id) 당 한 행

    points_balance 는 해당 팀 계정에 적립된 포인트이며 0 미만이 될 수 없습니다.
    credentials 에는 외부 팀 API 연동 정보(api_key, account_id)가 저장됩니다.
    """

    __tablename__ = "user_teams"
    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="uq_user_team"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    points_balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    connected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    credentials: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    profile = relationship("Profile", back_populates="user_teams")
    team: Mapped[Team] = relationship(lazy="joined")
