# carlot/errors.py
"""Error taxonomy shared by services, adapters and the HTTP layer."""


class CarlotError(Exception):
    status_code = 500

    def __init__(self, message: str = "", *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = int(status_code)


class ValidationError(CarlotError):
    """Malformed input, rejected before any write."""
    status_code = 400


class NotFoundError(CarlotError):
    status_code = 404


class AuthError(CarlotError):
    """Missing (401) or rejected (403) bearer token."""
    status_code = 401


class DependencyError(CarlotError):
    """A repository, storage or third-party call failed."""
    status_code = 502
