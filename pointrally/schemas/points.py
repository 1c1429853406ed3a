from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from pointrally.core.ledger import TierEnum
from pointrally.models.points import TransactionTypeEnum


class TransactionEntry(BaseModel):
    """포인트 원장 항목"""

    id: str = Field(..., description="거래 ID")
    user_id: str = Field(..., description="사용자 ID")
    team_id: Optional[str] = Field(None, description="팀 ID (팀과 무관한 거래는 null)")
    type: TransactionTypeEnum = Field(..., description="거래 유형")
    amount: int = Field(..., description="포인트 변화량 (음수: 차감)")
    balance_after: int = Field(..., description="거래 후 총 잔액")
    description: str = Field(..., description="거래 사유")
    metadata: Optional[Dict[str, Any]] = Field(None, description="부가 정보")
    created_at: Optional[datetime] = Field(None, description="생성 시간")

    class Config:
        from_attributes = True


class PointsSummaryResponse(BaseModel):
    """GET /points 응답 - 잔액, 등급, 최근 거래 내역"""

    balance: int = Field(..., description="현재 총 포인트")
    tier: TierEnum = Field(..., description="현재 등급")
    next_tier: Optional[TierEnum] = Field(None, description="다음 등급")
    points_to_next_tier: int = Field(0, description="다음 등급까지 남은 포인트")
    transactions: List[TransactionEntry] = Field(..., description="거래 내역 (최신순)")


class PointsTransferRequest(BaseModel):
    """포인트 이전 요청"""

    recipient_email: EmailStr = Field(..., alias="recipientEmail", description="받는 사람 이메일")
    amount: int = Field(..., gt=0, description="이전할 포인트")
    note: Optional[str] = Field(None, max_length=255, description="메모")

    class Config:
        populate_by_name = True


class PointsTransferResult(BaseModel):
    """포인트 이전 결과 (서비스 내부 반환값)"""

    from_transaction: TransactionEntry
    to_transaction: TransactionEntry


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PointsIntegrityCheckResponse(BaseModel):
    """포인트 정합성 검증 응답"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    user_id: str = Field(..., description="사용자 ID")
    cached_total: int = Field(..., description="profiles.total_points 값")
    team_balance_total: int = Field(..., description="연결 팀 잔액 합계")
    latest_balance_after: Optional[int] = Field(
        None, description="최신 거래의 balance_after"
    )
    entry_count: int = Field(..., description="거래 건수")
    verified_at: datetime = Field(..., description="검증 시간")
