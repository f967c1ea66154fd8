"""Custom exceptions for the back-office application."""

class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(AppError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(AppError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class ValidationError(BusinessLogicError):
    """Raised when submitted field values are rejected."""
    def __init__(self, errors, message="Validation failed"):
        self.errors = dict(errors)
        super().__init__(message, status_code=422, payload={'errors': self.errors})
