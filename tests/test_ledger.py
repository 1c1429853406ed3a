import re

import pytest

from pointrally.core.ledger import (
    TierEnum,
    apply_delta,
    compute_tier,
    generate_redemption_code,
    next_tier_progress,
)


class TestComputeTier:
    """총 포인트 -> 등급 경계값 테스트"""

    @pytest.mark.parametrize(
        "total, expected",
        [
            (0, TierEnum.BRONZE),
            (999, TierEnum.BRONZE),
            (1000, TierEnum.SILVER),
            (4999, TierEnum.SILVER),
            (5000, TierEnum.GOLD),
            (9999, TierEnum.GOLD),
            (10000, TierEnum.PLATINUM),
            (250000, TierEnum.PLATINUM),
        ],
    )
    def test_boundaries(self, total, expected):
        assert compute_tier(total) == expected

    def test_tier_values_are_lowercase(self):
        assert compute_tier(1000).value == "silver"


class TestNextTierProgress:
    def test_bronze_needs_points_for_silver(self):
        assert next_tier_progress(250) == (TierEnum.SILVER, 750)

    def test_exact_boundary_targets_following_tier(self):
        assert next_tier_progress(5000) == (TierEnum.PLATINUM, 5000)

    def test_platinum_has_no_next_tier(self):
        assert next_tier_progress(12000) == (None, 0)


class TestApplyDelta:
    @pytest.mark.parametrize(
        "balance, delta, expected",
        [
            (100, 50, 150),
            (100, -40, 60),
            (100, -100, 0),
            (100, -150, 0),
            (0, -1, 0),
            (0, 0, 0),
        ],
    )
    def test_never_negative(self, balance, delta, expected):
        assert apply_delta(balance, delta) == expected
        assert apply_delta(balance, delta) == max(0, balance + delta)


class TestRedemptionCode:
    def test_format(self):
        code = generate_redemption_code()
        assert re.fullmatch(r"[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}", code)

    def test_codes_differ(self):
        codes = {generate_redemption_code() for _ in range(50)}
        assert len(codes) == 50
