"""
Shared error handling for the access-rules evaluator.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AccessRulesException(Exception):
    """Base exception for the access-rules evaluator."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthorizationError(AccessRulesException):
    """Authorization-related errors."""

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class AccessDeniedError(AuthorizationError):
    """Raised by a guard when the decision is a denial."""

    def __init__(self, action: Any, subject: Any, reason: Optional[str] = None):
        details = {"action": repr(action), "subject": repr(subject)}
        if reason:
            details["reason"] = reason
        super().__init__(f"Not authorized to {action!r} {subject!r}", details)
        self.action = action
        self.subject = subject
        self.reason = reason


class RuleDefinitionError(AccessRulesException):
    """Invalid permission definition."""

    def __init__(self, message: str = "Invalid permission definition", details: Optional[Dict[str, Any]] = None):
        super().__init__("RULE_DEFINITION_ERROR", message, details)


class PermissionsFrozenError(RuleDefinitionError):
    """A permission set was changed after it was frozen."""

    def __init__(self, name: str):
        super().__init__(
            f"Permission set '{name}' is frozen and can no longer be modified",
            {"permission_set": name}
        )
