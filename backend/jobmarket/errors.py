"""Typed failures raised by the services and mapped to HTTP responses in ``main``."""


class MarketplaceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class AuthenticationError(MarketplaceError):
    status_code = 401


class AuthorizationError(MarketplaceError):
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change application status from '{current}' to '{target}'")
        self.current = current
        self.target = target


class ThrottledError(MarketplaceError):
    status_code = 429

    def __init__(self, retry_after_seconds: float):
        super().__init__("Too many failed attempts, try again later")
        self.retry_after_seconds = retry_after_seconds
