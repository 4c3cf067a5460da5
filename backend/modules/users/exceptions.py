"""
User administration exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when the target identity doesn't exist."""

    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            code="NOT_FOUND",
            details={"user_id": user_id},
        )


class SelfActionError(ValidationError):
    """Raised when an admin targets their own identity with a destructive action."""

    def __init__(self, action: str):
        super().__init__(
            f"Cannot {action} yourself",
            code="SELF_ACTION",
            details={"action": action},
        )
