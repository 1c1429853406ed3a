from fastapi import Depends
from sqlalchemy.orm import Session

from pointrally.database.session import get_db

# Services
from pointrally.services.point_service import PointService
from pointrally.services.profile_service import ProfileService
from pointrally.services.reward_service import RewardService
from pointrally.services.team_service import TeamService


def get_point_service(db: Session = Depends(get_db)) -> PointService:
    return PointService(db=db)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db=db)


def get_reward_service(db: Session = Depends(get_db)) -> RewardService:
    return RewardService(db=db, point_service=PointService(db=db))


def get_team_service(db: Session = Depends(get_db)) -> TeamService:
    return TeamService(db=db, point_service=PointService(db=db))
