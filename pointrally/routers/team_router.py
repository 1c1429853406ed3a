import logging
from typing import List, Optional, Union

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, Query

from pointrally.containers import Container
from pointrally.core.auth_middleware import get_current_user
from pointrally.core.exceptions import BaseAPIException, InternalServerError
from pointrally.deps import get_team_service
from pointrally.models.team import SportEnum
from pointrally.providers.team_sync import TeamSyncClient
from pointrally.schemas.auth import AuthUser
from pointrally.schemas.points import MessageResponse
from pointrally.schemas.team import (
    TeamConnectRequest,
    TeamConnectResponse,
    TeamItem,
    TeamSyncRequest,
    TeamSyncResponse,
    UserTeamItem,
)
from pointrally.services.team_service import TeamService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=List[Union[UserTeamItem, TeamItem]])
@inject
async def get_teams(
    connected: bool = Query(False, description="true 면 내가 연결한 팀만"),
    sport: Optional[SportEnum] = Query(None, description="종목 필터"),
    current_user: AuthUser = Depends(get_current_user),
    team_service: TeamService = Depends(get_team_service),
) -> List[Union[UserTeamItem, TeamItem]]:
    """팀 카탈로그 또는 내가 연결한 팀 목록"""
    if connected:
        user_teams = team_service.get_user_teams(current_user.id)
        if sport is not None:
            user_teams = [ut for ut in user_teams if ut.team and ut.team.sport == sport]
        return user_teams
    return team_service.get_all_teams(sport)


@router.post("", response_model=TeamConnectResponse)
@inject
async def connect_team(
    request: TeamConnectRequest,
    current_user: AuthUser = Depends(get_current_user),
    team_service: TeamService = Depends(get_team_service),
) -> TeamConnectResponse:
    """
    팀 연결

    HTTP Status:
        200: 연결 완료
        400: 최대 연결 수 초과
        404: 팀 없음
        409: 이미 연결된 팀
    """
    credentials = {}
    if request.api_key:
        credentials["api_key"] = request.api_key
    if request.account_id:
        credentials["account_id"] = request.account_id

    user_team = team_service.connect_team(current_user.id, request.team_id, credentials)
    team_name = user_team.team.name if user_team.team else request.team_id
    return TeamConnectResponse(
        message=f"Successfully connected to {team_name}",
        user_team=user_team,
    )


@router.delete("/{team_id}", response_model=MessageResponse)
@inject
async def disconnect_team(
    team_id: str = Path(..., description="연결 해제할 팀 ID"),
    current_user: AuthUser = Depends(get_current_user),
    team_service: TeamService = Depends(get_team_service),
) -> MessageResponse:
    team_service.disconnect_team(current_user.id, team_id)
    return MessageResponse(message="Team disconnected")


@router.post("/sync", response_model=TeamSyncResponse)
@inject
async def sync_team(
    request: TeamSyncRequest,
    current_user: AuthUser = Depends(get_current_user),
    team_service: TeamService = Depends(get_team_service),
    team_sync_client: TeamSyncClient = Depends(
        Provide[Container.clients.team_sync_client]
    ),
) -> TeamSyncResponse:
    """
    팀 포인트 동기화 - 외부 팀 API 잔액으로 덮어쓰기

    HTTP Status:
        200: 동기화 완료
        400: 저장된 API 키 없음
        404: 연결되지 않은 팀
        502: 팀 API 호출 실패
    """
    try:
        user_team = team_service.get_user_team(current_user.id, request.team_id)
        team = user_team.team or team_service.get_team_by_id(request.team_id)

        new_balance = await team_sync_client.fetch_points_balance(
            team, user_team.credentials or {}, user_team.points_balance
        )
        synced = team_service.sync_team_points(
            current_user.id, request.team_id, new_balance
        )

        points_added = synced.points_balance - user_team.points_balance
        return TeamSyncResponse(
            message=f"Synced {points_added} points from {team.name}",
            points_added=points_added,
            new_team_total=synced.points_balance,
        )
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to sync team for user {current_user.id}: {str(e)}")
        raise InternalServerError("Failed to sync team points")
