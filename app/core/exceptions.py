"""
Application errors raised by the services.

Endpoints translate them into HTTP responses: not found -> 404,
validation and business rules -> 400, conflicts -> 409.
"""

class BaseAppException(Exception):
    """Base application exception"""
    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class NotFoundError(BaseAppException):
    """A record does not exist or belongs to another user"""


class ValidationError(BaseAppException):
    """Input that passed the schema but not the service checks"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, details)
        self.error_code = error_code


class ConflictError(BaseAppException):
    """A record with the same unique key already exists"""


class BusinessLogicError(BaseAppException):
    """The operation is not allowed in the current state"""


class DuplicateBudgetError(ConflictError):
    def __init__(self, category_name: str, month):
        super().__init__(
            "Budget already exists for this category and month",
            details=f"{category_name} {month:%Y-%m}",
        )


class ProtectedCategoryError(BusinessLogicError):
    """Predefined or still-referenced categories cannot change"""
