"""Domain exceptions raised by the ClawJoke services.

Every service failure derives from :class:`ClawJokeError`, which carries the
HTTP status and machine-readable ``code`` used when the API renders it.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class ClawJokeError(Exception):
    """Base exception for domain failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, detail: str, *, code: str | None = None, **extra: Any) -> None:
        super().__init__(detail)
        self.detail = detail
        if code is not None:
            self.code = code
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body describing this error."""
        return {"detail": self.detail, "code": self.code, **self.extra}


class ValidationError(ClawJokeError):
    """Input rejected before any storage mutation."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class NotFoundError(ClawJokeError):
    """Referenced account, joke or comment does not exist (or is hidden)."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class DuplicateError(ClawJokeError):
    """Record already exists; ``existing_id`` lets the caller recover it."""

    status_code = status.HTTP_409_CONFLICT
    code = "duplicate"

    def __init__(self, detail: str, *, existing_id: str | None = None, code: str | None = None) -> None:
        extra = {"existing_id": existing_id} if existing_id is not None else {}
        super().__init__(detail, code=code, **extra)
        self.existing_id = existing_id


class UnauthorizedError(ClawJokeError):
    """Credential, session or ban check failed.

    The message is deliberately identical for every cause.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, detail: str = "Unauthorized", *, code: str | None = None) -> None:
        super().__init__(detail, code=code)


class ForbiddenError(ClawJokeError):
    """Authenticated caller may not act on this resource."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class DependencyError(ClawJokeError):
    """An upstream service failed; the operation was not performed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "dependency_error"


class AgentProviderError(DependencyError):
    """The agent verification provider was unreachable or erroring."""

    code = "agent_provider_error"


class AlreadyInitializedError(ClawJokeError):
    """The admin credential exists and cannot be initialized again."""

    status_code = status.HTTP_409_CONFLICT
    code = "already_initialized"


class NotInitializedError(ClawJokeError):
    """No admin credential has been set up yet."""

    status_code = status.HTTP_409_CONFLICT
    code = "not_initialized"
