"""
포인트 원장 리포지토리

transactions 테이블에 대한 모든 접근을 담당합니다:
1. 거래 기록 (append-only, 수정/삭제 없음)
2. 사용자별/팀별 거래 내역 조회
3. 정합성 검증용 최신 거래 조회

잔액 계산과 검증은 서비스 계층에서 수행하며, 이 리포지토리는
호출자가 계산한 amount / balance_after 를 그대로 기록합니다.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from pointrally.models.points import (
    PointsTransaction as PointsTransactionModel,
    TransactionTypeEnum,
)
from pointrally.repositories.base import BaseRepository
from pointrally.schemas.points import TransactionEntry


class PointsRepository(BaseRepository[PointsTransactionModel, TransactionEntry]):
    """포인트 원장 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(PointsTransactionModel, TransactionEntry, db)

    def _to_schema(
        self, model_instance: Optional[PointsTransactionModel]
    ) -> Optional[TransactionEntry]:
        """
        SQLAlchemy 모델을 Pydantic 스키마로 변환

        Note:
            모델의 metadata 컬럼은 metadata_ 속성으로 매핑되어 있어
            from_attributes 변환 대신 직접 매핑합니다.
        """
        if model_instance is None:
            return None

        return TransactionEntry(
            id=model_instance.id,
            user_id=model_instance.user_id,
            team_id=model_instance.team_id,
            type=model_instance.type,
            amount=model_instance.amount,
            balance_after=model_instance.balance_after,
            description=model_instance.description,
            metadata=model_instance.metadata_,
            created_at=model_instance.created_at,
        )

    def record(
        self,
        user_id: str,
        type: TransactionTypeEnum,
        amount: int,
        balance_after: int,
        description: str,
        team_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        commit: bool = False,
    ) -> TransactionEntry:
        """
        원장에 거래 한 건 기록

        Args:
            amount: 부호 있는 변동량 (차감은 음수)
            balance_after: 거래 적용 직후 사용자의 총 포인트
            commit: 기본값 False - 잔액 변경과 같은 트랜잭션에서 호출됨
        """
        return self.create(
            commit=commit,
            user_id=user_id,
            team_id=team_id,
            type=type,
            amount=amount,
            balance_after=balance_after,
            description=description,
            metadata_=metadata,
        )

    def get_user_transactions(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[TransactionEntry]:
        """사용자 거래 내역 (최신순)"""
        query = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.created_at))
            .offset(offset)
            .limit(limit)
        )
        return self._to_schemas(query.all())

    def get_team_transactions(self, user_id: str, team_id: str) -> List[TransactionEntry]:
        query = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.team_id == team_id,
            )
            .order_by(desc(self.model_class.created_at))
        )
        return self._to_schemas(query.all())

    def get_latest(self, user_id: str) -> Optional[TransactionEntry]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.created_at))
            .first()
        )
        return self._to_schema(model_instance)

    def count_user_transactions(self, user_id: str) -> int:
        return self.count({"user_id": user_id})
