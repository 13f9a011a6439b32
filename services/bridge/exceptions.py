"""
Domain Exceptions for Bridge-Y

Exception hierarchy for the activity gateway.
All exceptions inherit from BaseBridgeException and carry a message that is
safe to show to callers; internal error text stays in the logs.
"""


class BaseBridgeException(Exception):
    """Base exception for every error surfaced to API callers"""

    def __init__(self, message: str, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Serialize for the API response body"""
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


# =============================================================================
# Client errors
# =============================================================================

class ValidationFailed(BaseBridgeException):
    """Request body or query string does not match its schema"""

    def __init__(self, errors: list):
        super().__init__(message="Validation failed", details=errors)


class ReceiptNotFound(BaseBridgeException):
    """No shelf change carries the requested receipt hash"""

    def __init__(self, receipt_hash: str):
        self.receipt_hash = receipt_hash
        super().__init__(message="Receipt not found")


# =============================================================================
# Store errors
# =============================================================================

class StoreUnavailable(BaseBridgeException):
    """Database cannot be reached (not configured, refused, pool timeout)"""

    def __init__(self, reason: str = "Store unavailable"):
        super().__init__(message="Store unavailable")
        self.reason = reason


class StoreError(BaseBridgeException):
    """Statement failed inside the database"""

    def __init__(self, reason: str = "Store error"):
        super().__init__(message="Store error")
        self.reason = reason


# =============================================================================
# HTTP Status Mapping
# =============================================================================

EXCEPTION_TO_STATUS = {
    ValidationFailed: 400,
    ReceiptNotFound: 404,
    StoreError: 500,
    StoreUnavailable: 503,
}
