"""Custom exceptions for the store credit ledger."""

class LedgerError(Exception):
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

class ValidationError(LedgerError):
    """Raised when request input is malformed or out of range."""
    def __init__(self, errors=None, message="Invalid input"):
        self.errors = errors or {}
        super().__init__(message, 400, {'errors': self.errors})

class BusinessLogicError(LedgerError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(LedgerError):
    """Exception raised when a resource is not found (or belongs to another store)."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class AuthenticationError(LedgerError):
    """Raised when the request carries no valid login."""
    def __init__(self, message="Authentication required"):
        super().__init__(message, 401)

class PermissionDeniedError(LedgerError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Insufficient permissions"):
        super().__init__(message, 403)
