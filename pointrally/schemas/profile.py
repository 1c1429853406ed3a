from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from pointrally.core.ledger import TierEnum

# PATCH /profile 에서 변경 가능한 필드
PROFILE_UPDATABLE_FIELDS = ("display_name", "photo_url", "bio", "preferences")


class ProfileResponse(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    total_points: int = 0
    tier: TierEnum = TierEnum.BRONZE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileDetailResponse(ProfileResponse):
    """GET /profile 응답 - 연결 팀 수 포함"""

    connected_teams: int = Field(0, alias="connectedTeams")

    class Config:
        from_attributes = True
        populate_by_name = True


class ProfileCreateRequest(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(None, description="토큰에 이메일이 없을 때 사용")


class ProfileUpdateRequest(BaseModel):
    """허용 필드 외의 값은 무시"""

    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=1000)
    preferences: Optional[Dict[str, Any]] = None

    @field_validator("display_name")
    @classmethod
    def display_name_must_not_be_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.strip() == "":
            raise ValueError("Display name cannot be empty")
        return v


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    profile: ProfileResponse


class ProfileDeleteRequest(BaseModel):
    confirm_delete: bool = Field(False, alias="confirmDelete")

    class Config:
        populate_by_name = True
