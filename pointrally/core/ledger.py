"""
포인트 원장 기본 연산

I/O 없이 잔액 계산, 등급 산정, 교환 코드 생성만 담당하는 순수 함수 모음입니다.
서비스 계층은 모든 잔액 변경을 이 함수들을 통해 계산합니다.
"""

import enum
import secrets
from typing import Optional, Tuple

REDEMPTION_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
REDEMPTION_CODE_LENGTH = 12
REDEMPTION_CODE_GROUP = 4


class TierEnum(str, enum.Enum):
    """총 포인트로 결정되는 회원 등급"""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


# (등급, 하한 포인트) - 하한 포함, 내림차순
TIER_THRESHOLDS: Tuple[Tuple[TierEnum, int], ...] = (
    (TierEnum.PLATINUM, 10000),
    (TierEnum.GOLD, 5000),
    (TierEnum.SILVER, 1000),
    (TierEnum.BRONZE, 0),
)


def compute_tier(total_points: int) -> TierEnum:
    """총 포인트에 해당하는 등급 반환

    bronze [0, 1000), silver [1000, 5000), gold [5000, 10000), platinum [10000, ∞)
    """
    for tier, lower_bound in TIER_THRESHOLDS:
        if total_points >= lower_bound:
            return tier
    return TierEnum.BRONZE


def next_tier_progress(total_points: int) -> Tuple[Optional[TierEnum], int]:
    """다음 등급과 남은 포인트 (최고 등급이면 (None, 0))"""
    next_tier: Optional[TierEnum] = None
    next_bound = 0
    for tier, lower_bound in TIER_THRESHOLDS:
        if total_points >= lower_bound:
            break
        next_tier, next_bound = tier, lower_bound

    if next_tier is None:
        return None, 0
    return next_tier, next_bound - total_points


def apply_delta(balance: int, delta: int) -> int:
    """잔액에 변동량을 적용 (0 미만으로 내려가지 않음)"""
    return max(0, balance + delta)


def generate_redemption_code() -> str:
    """화면 표시용 교환 코드 생성 (예: 7KQ2-M9XA-4TZP)

    보안 토큰이 아니며 충분히 겹치지 않는 수준의 식별자입니다.
    """
    chars = [
        secrets.choice(REDEMPTION_CODE_ALPHABET)
        for _ in range(REDEMPTION_CODE_LENGTH)
    ]
    groups = [
        "".join(chars[i : i + REDEMPTION_CODE_GROUP])
        for i in range(0, REDEMPTION_CODE_LENGTH, REDEMPTION_CODE_GROUP)
    ]
    return "-".join(groups)
