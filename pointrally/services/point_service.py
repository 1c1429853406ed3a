import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pointrally.core.exceptions import (
    BaseAPIException,
    InsufficientBalanceError,
    InternalServerError,
    InvalidInputError,
    NotFoundError,
)
from pointrally.core.ledger import apply_delta, compute_tier
from pointrally.database.session import transactional
from pointrally.models.points import TransactionTypeEnum
from pointrally.repositories.points_repository import PointsRepository
from pointrally.repositories.profile_repository import ProfileRepository
from pointrally.repositories.team_repository import UserTeamRepository
from pointrally.schemas.points import (
    PointsIntegrityCheckResponse,
    PointsTransferResult,
    TransactionEntry,
)

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 100


class PointService:
    """포인트 원장 관련 비즈니스 로직을 담당하는 서비스

    모든 변경 메서드는 하나의 DB 트랜잭션으로 처리됩니다.
    1. 영향받는 사용자의 프로필 행 잠금
    2. 팀별 잔액 변경
    3. 총 포인트/등급 재계산
    4. 원장 기록

    commit=False 로 호출하면 상위 서비스(리워드 교환 등)의 트랜잭션에 합류합니다.
    """

    def __init__(self, db: Session):
        self.db = db
        self.points_repo = PointsRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.user_team_repo = UserTeamRepository(db)

    def get_current_balance(self, user_id: str) -> int:
        """사용자 총 포인트 조회

        Args:
            user_id: 사용자 ID

        Returns:
            int: profiles.total_points (프로필이 없으면 0)
        """
        profile = self.profile_repo.get_by_id(user_id)
        if profile is None:
            logger.warning(f"Profile not found while reading balance: {user_id}")
            return 0
        return profile.total_points

    def recalculate_totals(self, user_id: str) -> int:
        """팀별 잔액 합계로 총 포인트와 등급을 다시 계산 (커밋하지 않음)"""
        total = self.user_team_repo.sum_balances(user_id)
        self.profile_repo.update(
            user_id, commit=False, total_points=total, tier=compute_tier(total)
        )
        return total

    def earn_points(
        self,
        user_id: str,
        team_id: str,
        amount: int,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        commit: bool = True,
    ) -> TransactionEntry:
        """팀 포인트 적립

        Args:
            user_id: 사용자 ID
            team_id: 적립 대상 팀 ID (연결되어 있어야 함)
            amount: 적립 포인트 (양수)
            description: 거래 사유
            metadata: 부가 정보

        Returns:
            TransactionEntry: 기록된 earned 거래
        """
        if amount <= 0:
            raise InvalidInputError("Amount must be positive")

        try:
            with transactional(self.db, commit):
                self.profile_repo.lock([user_id])

                connection = self.user_team_repo.get_connection(user_id, team_id)
                if connection is None:
                    raise NotFoundError("Team connection not found")

                self.user_team_repo.set_balance(
                    connection.id,
                    apply_delta(connection.points_balance, amount),
                    commit=False,
                )
                total = self.recalculate_totals(user_id)

                entry = self.points_repo.record(
                    user_id=user_id,
                    team_id=team_id,
                    type=TransactionTypeEnum.EARNED,
                    amount=amount,
                    balance_after=total,
                    description=description,
                    metadata=metadata,
                )

            logger.info(
                f"Earned {amount} points for user {user_id} on team {team_id}: total {total}"
            )
            return entry
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to earn points for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to earn points")

    def redeem_points(
        self,
        user_id: str,
        amount: int,
        description: str,
        team_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        commit: bool = True,
    ) -> TransactionEntry:
        """포인트 사용

        team_id 가 주어지면 해당 팀 잔액에서, 없으면 잔액이 큰 팀부터 차감합니다.

        Raises:
            InsufficientBalanceError: 총 포인트(또는 지정 팀 잔액)가 부족한 경우
        """
        if amount <= 0:
            raise InvalidInputError("Amount must be positive")

        try:
            with transactional(self.db, commit):
                self.profile_repo.lock([user_id])

                current = self.get_current_balance(user_id)
                if current < amount:
                    logger.warning(
                        f"Insufficient balance for user {user_id}: "
                        f"required {amount}, available {current}"
                    )
                    raise InsufficientBalanceError(
                        details={"required": amount, "available": current}
                    )

                debited = self._debit_teams(user_id, amount, team_id)
                total = self.recalculate_totals(user_id)

                entry_metadata = dict(metadata or {})
                if team_id is None:
                    entry_metadata["debited_teams"] = debited

                entry = self.points_repo.record(
                    user_id=user_id,
                    team_id=team_id,
                    type=TransactionTypeEnum.REDEEMED,
                    amount=-amount,
                    balance_after=total,
                    description=description,
                    metadata=entry_metadata or None,
                )

            logger.info(f"Redeemed {amount} points for user {user_id}: total {total}")
            return entry
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to redeem points for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to redeem points")

    def transfer_points(
        self,
        from_user_id: str,
        to_user_id: str,
        amount: int,
        description: Optional[str] = None,
        commit: bool = True,
    ) -> PointsTransferResult:
        """사용자 간 포인트 이전

        보내는 사람은 redeem_points 와 같은 순서로 팀 잔액에서 차감되고,
        받는 사람은 가장 먼저 연결한 팀 잔액으로 적립됩니다.

        Returns:
            PointsTransferResult: 보낸 사람/받는 사람 transferred 거래
        """
        if amount <= 0:
            raise InvalidInputError("Amount must be positive")
        if from_user_id == to_user_id:
            raise InvalidInputError("Cannot transfer points to yourself")

        try:
            with transactional(self.db, commit):
                self.profile_repo.lock([from_user_id, to_user_id])

                current = self.get_current_balance(from_user_id)
                if current < amount:
                    logger.warning(
                        f"Insufficient balance for transfer from {from_user_id}: "
                        f"required {amount}, available {current}"
                    )
                    raise InsufficientBalanceError(
                        details={"required": amount, "available": current}
                    )

                recipient_team = self.user_team_repo.get_earliest_connection(to_user_id)
                if recipient_team is None:
                    raise InvalidInputError("Recipient has no connected team")

                debited = self._debit_teams(from_user_id, amount)
                sender_total = self.recalculate_totals(from_user_id)

                self.user_team_repo.set_balance(
                    recipient_team.id,
                    apply_delta(recipient_team.points_balance, amount),
                    commit=False,
                )
                recipient_total = self.recalculate_totals(to_user_id)

                from_transaction = self.points_repo.record(
                    user_id=from_user_id,
                    type=TransactionTypeEnum.TRANSFERRED,
                    amount=-amount,
                    balance_after=sender_total,
                    description=description or "Points transferred",
                    metadata={"to_user_id": to_user_id, "debited_teams": debited},
                )
                to_transaction = self.points_repo.record(
                    user_id=to_user_id,
                    team_id=recipient_team.team_id,
                    type=TransactionTypeEnum.TRANSFERRED,
                    amount=amount,
                    balance_after=recipient_total,
                    description=description or "Points received",
                    metadata={"from_user_id": from_user_id},
                )

            logger.info(
                f"Transferred {amount} points from {from_user_id} to {to_user_id}"
            )
            return PointsTransferResult(
                from_transaction=from_transaction, to_transaction=to_transaction
            )
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to transfer points from {from_user_id} to {to_user_id}: {str(e)}"
            )
            raise InternalServerError("Failed to transfer points")

    def expire_points(
        self,
        user_id: str,
        team_id: str,
        amount: int,
        reason: str,
        commit: bool = True,
    ) -> TransactionEntry:
        """팀 포인트 소멸

        팀 잔액은 0 미만으로 내려가지 않으며, 실제로 차감된 양을 amount 로 기록합니다.
        """
        if amount <= 0:
            raise InvalidInputError("Amount must be positive")

        try:
            with transactional(self.db, commit):
                self.profile_repo.lock([user_id])

                connection = self.user_team_repo.get_connection(user_id, team_id)
                if connection is None:
                    raise NotFoundError("Team connection not found")

                new_balance = apply_delta(connection.points_balance, -amount)
                applied = new_balance - connection.points_balance
                self.user_team_repo.set_balance(connection.id, new_balance, commit=False)
                total = self.recalculate_totals(user_id)

                entry = self.points_repo.record(
                    user_id=user_id,
                    team_id=team_id,
                    type=TransactionTypeEnum.EXPIRED,
                    amount=applied,
                    balance_after=total,
                    description=reason,
                    metadata={"requested_amount": amount},
                )

            logger.info(
                f"Expired {-applied} of {amount} requested points for user {user_id} "
                f"on team {team_id}"
            )
            return entry
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to expire points for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to expire points")

    def get_transaction_history(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[TransactionEntry]:
        """거래 내역 조회 (최신순, 최대 100건)"""
        limit = max(1, min(limit, MAX_HISTORY_LIMIT))
        offset = max(0, offset)
        return self.points_repo.get_user_transactions(user_id, limit=limit, offset=offset)

    def get_transactions_by_team(self, user_id: str, team_id: str) -> List[TransactionEntry]:
        return self.points_repo.get_team_transactions(user_id, team_id)

    def verify_user_integrity(self, user_id: str) -> PointsIntegrityCheckResponse:
        """캐시된 총 포인트를 팀 잔액 합계 및 최신 원장 잔액과 비교"""
        profile = self.profile_repo.get_by_id(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")

        team_total = self.user_team_repo.sum_balances(user_id)
        latest = self.points_repo.get_latest(user_id)
        latest_balance = latest.balance_after if latest else None

        consistent = profile.total_points == team_total and (
            latest_balance is None or latest_balance == team_total
        )
        if not consistent:
            logger.warning(
                f"Points mismatch for user {user_id}: cached={profile.total_points}, "
                f"teams={team_total}, ledger={latest_balance}"
            )

        return PointsIntegrityCheckResponse(
            status="OK" if consistent else "MISMATCH",
            user_id=user_id,
            cached_total=profile.total_points,
            team_balance_total=team_total,
            latest_balance_after=latest_balance,
            entry_count=self.points_repo.count_user_transactions(user_id),
            verified_at=datetime.now(timezone.utc),
        )

    def _debit_teams(
        self, user_id: str, amount: int, team_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """팀 잔액에서 amount 만큼 차감하고 팀별 차감 내역을 반환"""
        if team_id is not None:
            connection = self.user_team_repo.get_connection(user_id, team_id)
            if connection is None:
                raise NotFoundError("Team connection not found")
            if connection.points_balance < amount:
                raise InsufficientBalanceError(
                    details={"required": amount, "available": connection.points_balance}
                )
            self.user_team_repo.set_balance(
                connection.id, connection.points_balance - amount, commit=False
            )
            return [{"team_id": team_id, "amount": amount}]

        remaining = amount
        debited = []
        for connection in self.user_team_repo.get_user_teams_by_balance(user_id):
            if remaining == 0:
                break
            take = min(remaining, connection.points_balance)
            self.user_team_repo.set_balance(
                connection.id, connection.points_balance - take, commit=False
            )
            debited.append({"team_id": connection.team_id, "amount": take})
            remaining -= take

        if remaining > 0:
            # 캐시된 총 포인트와 팀 잔액 합계가 어긋난 경우
            raise InsufficientBalanceError(
                details={"required": amount, "available": amount - remaining}
            )
        return debited
