class ValidationError(Exception):
    """Raised when a request carries a malformed or missing field, or a non-numeric id."""


class NotFoundError(Exception):
    """Raised when no task matches the requested id."""


class CSRFViolation(Exception):
    """Raised when a state-changing request fails the CSRF checks."""


class AuthFailure(Exception):
    """Raised when the OAuth exchange fails or yields no principal."""


class ProviderNotConfigured(AuthFailure):
    """Raised when the OAuth client id or secret is missing."""
