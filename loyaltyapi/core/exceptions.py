from fastapi import HTTPException, status
from typing import Optional, Dict, Any

class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message

class AuthenticationError(BaseAPIException):
    """Authentication related errors"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )

class AuthorizationError(BaseAPIException):
    """Authorization related errors"""
    def __init__(self, message: str = "Access forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details
        )

class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )

class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )

class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )

class InsufficientBalanceError(BaseAPIException):
    """Debit would take the balance below zero"""
    def __init__(self, message: str = "Insufficient balance", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_001",
            message=message,
            details=details
        )

# ---------------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------------

class InvalidCodeFormatError(BaseAPIException):
    """Input does not contain a recognizable code"""
    def __init__(self, message: str = "Invalid code format", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="CODE_001",
            message=message,
            details=details
        )

class CodeNotFoundError(BaseAPIException):
    def __init__(self, message: str = "Code not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="CODE_002",
            message=message,
            details=details
        )

class CodeAlreadyUsedError(BaseAPIException):
    def __init__(self, message: str = "Code already used", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="CODE_003",
            message=message,
            details=details
        )

class CodeNotRedeemedError(BaseAPIException):
    """Purchase code scanned by staff before the buyer redeemed it"""
    def __init__(self, message: str = "Purchase code has not been redeemed yet", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="CODE_004",
            message=message,
            details=details
        )

class CodeGenerationExhaustedError(BaseAPIException):
    def __init__(self, message: str = "Could not generate a unique code", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="CODE_005",
            message=message,
            details=details
        )

class TargetNotFoundError(BaseAPIException):
    """Event or catalog item referenced by a code is missing"""
    def __init__(self, message: str = "Code target not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="TARGET_001",
            message=message,
            details=details
        )

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class EventExpiredError(BaseAPIException):
    def __init__(self, message: str = "Event has already taken place", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="EVENT_001",
            message=message,
            details=details
        )

class AlreadyRegisteredError(BaseAPIException):
    def __init__(self, message: str = "Already registered for this event", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="EVENT_002",
            message=message,
            details=details
        )

class NotRegisteredError(BaseAPIException):
    def __init__(self, message: str = "Participant is not registered for this event", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="EVENT_003",
            message=message,
            details=details
        )

# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------

class AlreadyClaimedError(BaseAPIException):
    def __init__(self, message: str = "Reward already claimed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="ACHIEVEMENT_001",
            message=message,
            details=details
        )

class NotUnlockedError(BaseAPIException):
    def __init__(self, message: str = "Achievement is not unlocked", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="ACHIEVEMENT_002",
            message=message,
            details=details
        )

class NoRewardAvailableError(BaseAPIException):
    def __init__(self, message: str = "No reward available", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="ACHIEVEMENT_003",
            message=message,
            details=details
        )

# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------

class TokenNotFoundError(BaseAPIException):
    def __init__(self, message: str = "Transfer token not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="TRANSFER_001",
            message=message,
            details=details
        )

class TokenExpiredError(BaseAPIException):
    def __init__(self, message: str = "Transfer token expired", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_410_GONE,
            error_code="TRANSFER_002",
            message=message,
            details=details
        )

class SelfTransferError(BaseAPIException):
    def __init__(self, message: str = "Cannot process your own transfer token", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="TRANSFER_003",
            message=message,
            details=details
        )
