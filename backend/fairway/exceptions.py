from typing import Any, Optional

from fastapi import HTTPException
from pydantic import BaseModel


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str
    errors: Optional[list[dict[str, Any]]] = None


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code
        self.errors = errors

    def to_problem(self) -> ProblemDetail:
        return ProblemDetail(
            type=self.type,
            title=self.title,
            detail=self.detail,
            status=self.status_code,
            code=self.code,
            errors=self.errors,
        )


class EventNotFound(DomainException):
    def __init__(self, ref: str) -> None:
        super().__init__(
            status_code=404,
            title="Event not found",
            detail=f"event '{ref}' not found",
            code="event_not_found",
        )


class RoundNotFound(DomainException):
    def __init__(self, round_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Round not found",
            detail=f"round '{round_id}' not found",
            code="round_not_found",
        )


class PlayerNotFound(DomainException):
    def __init__(self, player_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{player_id}' not found",
            code="player_not_found",
        )


class ScorecardSaveFailed(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=502,
            title="Scorecard not saved",
            detail="save failed",
            code="scorecard_save_failed",
        )


class ScorecardConflict(DomainException):
    def __init__(self, cells: list[dict[str, Any]]) -> None:
        super().__init__(
            status_code=409,
            title="Scorecard changed",
            detail="someone else edited this scorecard; reload and try again",
            code="scorecard_conflict",
            errors=cells,
        )


class EventNotPublished(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=403,
            title="Event not published",
            detail="event is not published",
            code="event_not_published",
        )


class ClubhouseDisabled(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=403,
            title="Clubhouse disabled",
            detail="clubhouse is not enabled for this event",
            code="clubhouse_disabled",
        )


class ClubhouseUnavailable(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=403,
            title="Clubhouse unavailable",
            detail="clubhouse feature not available (database migration required)",
            code="clubhouse_unavailable",
        )


class InvalidClubhousePassword(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=401,
            title="Invalid password",
            detail="invalid clubhouse password",
            code="clubhouse_invalid_password",
        )


class InvalidClubhouseSession(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=401,
            title="Invalid session",
            detail="invalid or expired clubhouse session",
            code="clubhouse_invalid_session",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
