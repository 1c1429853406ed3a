from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from pointrally.models.team import SportEnum


class TeamItem(BaseModel):
    """팀 카탈로그 항목"""

    id: str
    name: str
    code: str
    sport: SportEnum
    city: str
    logo_url: Optional[str] = None
    primary_color: str
    secondary_color: Optional[str] = None

    class Config:
        from_attributes = True


class UserTeamItem(BaseModel):
    """사용자-팀 연결"""

    id: str = Field(..., description="연결 ID")
    user_id: str = Field(..., description="사용자 ID")
    team_id: str = Field(..., description="팀 ID")
    points_balance: int = Field(..., description="팀 포인트 잔액")
    connected_at: Optional[datetime] = Field(None, description="연결 시각")
    last_synced_at: Optional[datetime] = Field(None, description="마지막 동기화 시각")
    team: Optional[TeamItem] = Field(None, description="팀 정보")
    # 외부 API 자격 증명은 응답에서 제외
    credentials: Optional[Dict[str, Any]] = Field(None, exclude=True)

    class Config:
        from_attributes = True


class TeamConnectRequest(BaseModel):
    team_id: str = Field(..., alias="teamId", min_length=1, description="연결할 팀 ID")
    api_key: Optional[str] = Field(None, alias="apiKey", description="팀 API 키")
    account_id: Optional[str] = Field(None, alias="accountId", description="외부 계정 ID")

    class Config:
        populate_by_name = True


class TeamConnectResponse(BaseModel):
    success: bool = True
    message: str
    user_team: UserTeamItem = Field(..., alias="userTeam")

    class Config:
        populate_by_name = True


class TeamSyncRequest(BaseModel):
    team_id: str = Field(..., alias="teamId", min_length=1, description="동기화할 팀 ID")

    class Config:
        populate_by_name = True


class TeamSyncResponse(BaseModel):
    success: bool = True
    message: str
    points_added: int = Field(..., alias="pointsAdded")
    new_team_total: int = Field(..., alias="newTeamTotal")

    class Config:
        populate_by_name = True
