from typing import Optional


class OpenMusicError(Exception):
    """Base class for errors surfaced to the HTTP layer"""

    status_code: int = 500
    status: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(OpenMusicError):
    """Expected outcome the caller can act on"""

    status_code = 400
    status = "fail"


class NotFoundError(ClientError):
    """Referenced entity does not exist"""

    status_code = 404


class ConflictError(ClientError):
    """Uniqueness constraint violated (duplicate like, duplicate membership)"""

    status_code = 400


class AuthorizationError(ClientError):
    """Principal is not allowed to touch the resource"""

    status_code = 403


class AuthenticationError(ClientError):
    """Missing or invalid access token"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
        self.headers = {"WWW-Authenticate": "Bearer"}


class CacheTransportFailure(OpenMusicError):
    """Cache layer unreachable; distinct from a logical miss"""

    status_code = 503

    def __init__(self, message: str = "Cache unavailable", cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class StoreFailure(OpenMusicError):
    """Store error not otherwise classified"""

    status_code = 500


class ConstraintViolation(Exception):
    """Raised by the store when an insert or update breaks a constraint.

    Services translate it into ConflictError or NotFoundError; it never
    reaches the HTTP layer on its own.
    """

    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"

    def __init__(self, constraint: Optional[str], kind: str):
        super().__init__(f"{kind} constraint violated: {constraint or 'unknown'}")
        self.constraint = constraint
        self.kind = kind

    @property
    def is_unique(self) -> bool:
        return self.kind == self.UNIQUE

    @property
    def is_foreign_key(self) -> bool:
        return self.kind == self.FOREIGN_KEY
