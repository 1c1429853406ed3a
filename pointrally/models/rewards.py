import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pointrally.models.base import BaseModel, JSONType, new_uuid


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class RewardCategoryEnum(str, enum.Enum):
    TICKETS = "tickets"
    MERCHANDISE = "merchandise"
    EXPERIENCES = "experiences"
    FOOD = "food"
    DIGITAL = "digital"


class RewardAvailabilityEnum(str, enum.Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    SOLDOUT = "soldout"  # stock 이 0이 되면 자동 전환


class RedemptionStatusEnum(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Reward(BaseModel):
    __tablename__ = "rewards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[RewardCategoryEnum] = mapped_column(
        Enum(
            RewardCategoryEnum,
            name="reward_category",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    points_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    team_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    availability: Mapped[RewardAvailabilityEnum] = mapped_column(
        Enum(
            RewardAvailabilityEnum,
            name="reward_availability",
            native_enum=False,
            values_callable=_enum_values,
        ),
        default=RewardAvailabilityEnum.AVAILABLE,
        nullable=False,
    )
    # NULL 이면 재고 무제한
    stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    terms: Mapped[Optional[List[str]]] = mapped_column(JSONType, nullable=True)


class Redemption(BaseModel):
    __tablename__ = "redemptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reward_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("rewards.id"), nullable=False
    )
    points_used: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[RedemptionStatusEnum] = mapped_column(
        Enum(
            RedemptionStatusEnum,
            name="redemption_status",
            native_enum=False,
            values_callable=_enum_values,
        ),
        default=RedemptionStatusEnum.PENDING,
        nullable=False,
    )
    redemption_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    reward: Mapped[Reward] = relationship(lazy="joined")
