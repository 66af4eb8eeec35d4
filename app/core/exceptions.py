# app/core/exceptions.py
"""
Domain errors raised by the service layer.
Each class carries the HTTP status the API answers with; the mapping to a
JSON envelope happens once, in the exception handler registered in app.main.
"""


class PortalError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Missing or malformed input."""

    status_code = 400


class NoValidFields(ValidationError):
    pass


class InvalidPermissionIds(ValidationError):
    pass


class NotFound(PortalError):
    status_code = 404


class Unauthorized(PortalError):
    """No credential, or a credential that failed verification."""

    status_code = 401


class Forbidden(PortalError):
    """Authenticated, but lacking a required permission."""

    status_code = 403


class Conflict(PortalError):
    """Uniqueness or referential conflict."""

    status_code = 409


class BusinessRuleViolation(PortalError):
    status_code = 400


class TicketLimitExceeded(BusinessRuleViolation):
    pass


class InvalidTransition(BusinessRuleViolation):
    pass


class ProtectedRoleViolation(BusinessRuleViolation):
    pass
