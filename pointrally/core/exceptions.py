from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors

    클라이언트에는 {"success": false, "error": message} 만 노출되고
    error_code / details 는 로그 용도로만 사용됩니다.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"success": False, "error": message},
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class AuthenticationError(BaseAPIException):
    """Authentication related errors"""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details,
        )


class AuthorizationError(BaseAPIException):
    """Authorization related errors"""

    def __init__(self, message: str = "Access forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details,
        )


class InvalidInputError(BaseAPIException):
    """Missing/malformed fields, non-positive amounts"""

    def __init__(self, message: str = "Invalid input", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_001",
            message=message,
            details=details,
        )


class NotFoundError(BaseAPIException):
    """Resource not found errors"""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details,
        )


class ConflictError(BaseAPIException):
    """Resource conflict errors"""

    def __init__(self, message: str = "Resource conflict", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT_001",
            message=message,
            details=details,
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""

    def __init__(
        self, message: str = "Internal server error", details: Optional[Dict] = None
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details,
        )


class InsufficientBalanceError(BaseAPIException):
    """Insufficient balance errors"""

    def __init__(
        self, message: str = "Insufficient points balance", details: Optional[Dict] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_001",
            message=message,
            details=details,
        )


class InsufficientPointsError(BaseAPIException):
    """Reward cost exceeds the user's total points"""

    def __init__(self, message: str = "Insufficient points", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_002",
            message=message,
            details=details,
        )


class RewardSoldOutError(BaseAPIException):
    """Reward sold out or not enough stock"""

    def __init__(self, message: str = "Reward is sold out", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="REWARD_001",
            message=message,
            details=details,
        )


class RewardExpiredError(BaseAPIException):
    """Reward past its expiry date"""

    def __init__(self, message: str = "Reward has expired", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="REWARD_002",
            message=message,
            details=details,
        )


class ExternalServiceError(BaseAPIException):
    """Team API call failed or returned an unusable response"""

    def __init__(
        self, message: str = "Team service unavailable", details: Optional[Dict] = None
    ):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="EXTERNAL_001",
            message=message,
            details=details,
        )
