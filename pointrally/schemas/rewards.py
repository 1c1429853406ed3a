from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from pointrally.models.rewards import (
    RedemptionStatusEnum,
    RewardAvailabilityEnum,
    RewardCategoryEnum,
)


class RewardItem(BaseModel):
    """리워드 카탈로그 항목"""

    id: str = Field(..., description="리워드 ID")
    name: str = Field(..., description="상품명")
    description: str = Field("", description="상품 설명")
    category: RewardCategoryEnum = Field(..., description="카테고리")
    points_cost: int = Field(..., description="필요 포인트")
    image_url: Optional[str] = Field(None, description="상품 이미지 URL")
    team_id: Optional[str] = Field(None, description="팀 전용 리워드인 경우 팀 ID")
    availability: RewardAvailabilityEnum = Field(..., description="판매 상태")
    stock: Optional[int] = Field(None, description="재고 (null: 무제한)")
    expires_at: Optional[datetime] = Field(None, description="만료 시각")
    terms: Optional[List[str]] = Field(None, description="이용 약관")
    created_at: Optional[datetime] = Field(None, description="생성 시간")

    class Config:
        from_attributes = True


class RewardFilters(BaseModel):
    """리워드 목록 조회 필터"""

    category: Optional[RewardCategoryEnum] = None
    team_id: Optional[str] = None
    max_points: Optional[int] = Field(None, ge=0)
    availability: Optional[RewardAvailabilityEnum] = None


class RedemptionItem(BaseModel):
    """리워드 교환 내역"""

    id: str = Field(..., description="교환 ID")
    user_id: str = Field(..., description="사용자 ID")
    reward_id: str = Field(..., description="리워드 ID")
    points_used: int = Field(..., description="사용된 포인트")
    quantity: int = Field(1, description="수량")
    status: RedemptionStatusEnum = Field(..., description="교환 상태")
    redemption_code: Optional[str] = Field(None, description="교환 코드")
    processed_at: Optional[datetime] = Field(None, description="처리 완료 시간")
    created_at: Optional[datetime] = Field(None, description="교환 요청 시간")
    reward: Optional[RewardItem] = Field(None, description="리워드 정보")

    class Config:
        from_attributes = True


class RewardRedemptionRequest(BaseModel):
    """리워드 교환 요청"""

    reward_id: str = Field(..., alias="rewardId", min_length=1, description="교환할 리워드 ID")
    quantity: int = Field(1, ge=1, description="수량")

    class Config:
        populate_by_name = True


class RewardRedemptionResult(BaseModel):
    """리워드 교환 처리 결과 (서비스 반환값)"""

    redemption: Optional[RedemptionItem] = None
    success: bool
    message: str


class RedemptionSummary(BaseModel):
    id: str
    code: Optional[str] = None
    status: RedemptionStatusEnum
    points_spent: int = Field(..., alias="pointsSpent")

    class Config:
        populate_by_name = True


class RewardRedemptionResponse(BaseModel):
    """POST /rewards/redeem 응답"""

    success: bool
    message: str
    redemption: RedemptionSummary


class RedemptionStatusUpdateRequest(BaseModel):
    status: RedemptionStatusEnum = Field(..., description="변경할 상태")
    processed_at: Optional[datetime] = Field(None, alias="processedAt", description="처리 시각")

    class Config:
        populate_by_name = True
