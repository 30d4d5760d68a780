"""
Error types surfaced by the budget service
"""
from typing import Any, Dict, List, Optional


class BudgetServiceError(Exception):
    """Base error rendered as a JSON body with an `error` field"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class BudgetValidationError(BudgetServiceError):
    """Budget fields did not coerce to finite numbers"""

    status_code = 400
    DEFAULT_MESSAGE = "Expected JSON with numeric members, duesPerMember, and expenses"

    def __init__(self, invalid_fields: List[str], message: str = DEFAULT_MESSAGE):
        super().__init__(message)
        self.invalid_fields = list(invalid_fields)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "invalidFields": self.invalid_fields}


class BudgetNotSetError(BudgetServiceError):
    """An operation needs a stored budget but none was written yet"""

    status_code = 400

    def __init__(self, message: str = "Budget not set yet"):
        super().__init__(message)


class AssistantUnavailableError(BudgetServiceError):
    """The inference backend failed while answering a chat message"""

    status_code = 503

    def __init__(self, message: str = "Budget assistant is unavailable, please try again later"):
        super().__init__(message)
