import logging
import random
from typing import Any, Dict, Optional

import httpx

from pointrally.core.exceptions import ExternalServiceError, InvalidInputError
from pointrally.schemas.team import TeamItem

logger = logging.getLogger(__name__)

SIMULATED_GAIN_MIN = 100
SIMULATED_GAIN_MAX = 599


class TeamSyncClient:
    """팀 외부 API 에서 연결 계정의 포인트 잔액(절대값)을 조회

    base_url 이 없으면 외부 API 를 시뮬레이션하여 현재 잔액에 임의의 적립분을 더한 값을 돌려준다.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout

    @property
    def simulated(self) -> bool:
        return self.base_url is None

    async def fetch_points_balance(
        self,
        team: TeamItem,
        credentials: Dict[str, Any],
        current_balance: int,
    ) -> int:
        """Return the account's absolute points balance on the team's side"""
        api_key = credentials.get("api_key")
        if not api_key:
            raise InvalidInputError("No API key configured for this team")

        if self.simulated:
            balance = current_balance + random.randint(
                SIMULATED_GAIN_MIN, SIMULATED_GAIN_MAX
            )
            logger.info(f"Simulated team sync for {team.code}: {balance}")
            return balance

        account_id = credentials.get("account_id") or "me"
        url = f"{self.base_url}/accounts/{account_id}/points"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url, headers={"Authorization": f"Bearer {api_key}"}
                )

                if response.status_code != 200:
                    logger.error(
                        f"Team sync failed for {team.code}: "
                        f"{response.status_code} {response.text}"
                    )
                    raise ExternalServiceError("Failed to fetch team points")

                try:
                    data = response.json()
                except ValueError:
                    logger.error(
                        f"Non-JSON response from team {team.code}: {response.text[:200]}"
                    )
                    raise ExternalServiceError("Invalid response from team service")
        except httpx.TimeoutException:
            logger.error(f"Team sync timeout for {team.code}")
            raise ExternalServiceError("Team service timeout")
        except httpx.HTTPError as e:
            logger.error(f"Team sync error for {team.code}: {str(e)}")
            raise ExternalServiceError()

        balance = data.get("balance") if isinstance(data, dict) else None
        if not isinstance(balance, int) or balance < 0:
            logger.error(f"Invalid balance from team {team.code}: {data}")
            raise ExternalServiceError("Invalid response from team service")
        return balance
