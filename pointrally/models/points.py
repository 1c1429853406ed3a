"""
포인트 원장 데이터 모델

사용자 포인트의 모든 변동 내역을 저장하는 transactions 테이블을 정의합니다.
적립/사용/이전/소멸이 모두 이 테이블에 한 번씩 기록되어 감사 추적을 제공합니다.
"""

import enum
from typing import Optional

from sqlalchemy import Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pointrally.models.base import Base, CreatedAtMixin, JSONType, new_uuid


class TransactionTypeEnum(str, enum.Enum):
    EARNED = "earned"
    REDEEMED = "redeemed"
    TRANSFERRED = "transferred"
    EXPIRED = "expired"


class PointsTransaction(Base, CreatedAtMixin):
    """
    포인트 원장 항목

    1. 불변성: 한번 생성된 레코드는 수정되지 않음 (프로필 삭제 시 cascade 삭제만 허용)
    2. 정합성: balance_after 는 이 거래 적용 직후 사용자의 총 포인트
    """

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # 팀과 무관한 거래(이전 등)는 NULL
    team_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[TransactionTypeEnum] = mapped_column(
        Enum(
            TransactionTypeEnum,
            name="transaction_type",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    # 양수면 증가, 음수면 감소
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # declarative 의 metadata 속성과 겹치지 않도록 속성명만 변경
    metadata_: Mapped[Optional[dict]] = mapped_column(
        "metadata", JSONType, nullable=True
    )
