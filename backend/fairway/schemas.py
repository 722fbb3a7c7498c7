from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator, field_validator, ConfigDict

from .config import CLUBHOUSE_DISPLAY_NAME_MAX, MAX_STROKES, MIN_STROKES

MIN_PASSWORD_LENGTH = 8

PlayerStatus = Literal["invited", "accepted", "declined"]
ScoringType = Literal["stroke_play", "stableford"]
ContestType = Literal["longest_drive", "closest_to_pin"]


def _ensure_password_complexity(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if not value.strip():
        raise ValueError("Password must include at least one non-space character")
    if not any(ch.isalpha() for ch in value) or not any(ch.isdigit() for ch in value):
        raise ValueError("Password must include letters and numbers")
    return value


def _strip_required(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field} must not be empty")
    return trimmed


# ---------------------------------------------------------------------------
# auth
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    """Schema for owner signup requests."""
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    full_name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        trimmed = _strip_required(value, "email").lower()
        local, _, domain = trimmed.partition("@")
        if not local or "." not in domain:
            raise ValueError("email must be a valid address")
        return trimmed

    @field_validator("password")
    @classmethod
    def _check_password_complexity(cls, v: str) -> str:
        return _ensure_password_complexity(v)


class LoginRequest(BaseModel):
    """Schema for password sign-in."""
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return _strip_required(value, "email").lower()


class TokenOut(BaseModel):
    """Returned on successful authentication."""
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int


class UserOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None


class SessionOut(BaseModel):
    user: UserOut
    expires_at: datetime


# ---------------------------------------------------------------------------
# events
# ---------------------------------------------------------------------------

class EventBase(BaseModel):
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    logo_url: Optional[str] = Field(default=None, max_length=2000)
    is_private: bool = False
    is_published: bool = False


class EventCreate(EventBase):
    name: str = Field(..., min_length=1, max_length=200)
    clubhouse_password: Optional[str] = Field(default=None, min_length=1, max_length=200)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")

    @model_validator(mode="after")
    def _check_dates(self) -> "EventCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventUpdate(BaseModel):
    """Partial event update: only the fields present in the body change.

    ``clubhouse_password`` set to ``null`` disables the clubhouse.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    logo_url: Optional[str] = Field(default=None, max_length=2000)
    is_private: Optional[bool] = None
    is_published: Optional[bool] = None
    clubhouse_password: Optional[str] = Field(default=None, min_length=1, max_length=200)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("name must not be null")
        return _strip_required(value, "name")

    @field_validator("is_private", "is_published", mode="before")
    @classmethod
    def _reject_null_flags(cls, value: Optional[bool]) -> bool:
        if value is None:
            raise ValueError("flag must not be null")
        return value


class EventOut(EventBase):
    id: str
    name: str
    slug: str
    user_id: str
    clubhouse_enabled: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EventOut":
        return cls(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            user_id=row["user_id"],
            location=row.get("location"),
            description=row.get("description"),
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            logo_url=row.get("logo_url"),
            is_private=bool(row.get("is_private")),
            is_published=bool(row.get("is_published")),
            clubhouse_enabled=bool(row.get("clubhouse_password")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class PublicEventOut(BaseModel):
    id: str
    name: str
    slug: str
    location: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    logo_url: Optional[str] = None
    clubhouse_enabled: bool = False


# ---------------------------------------------------------------------------
# players, rounds, contests
# ---------------------------------------------------------------------------

class EventPlayerCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=254)
    handicap: Optional[float] = Field(default=None, ge=-10, le=54)
    bio: Optional[str] = Field(default=None, max_length=2000)
    profile_image: Optional[str] = Field(default=None, max_length=2000)
    status: PlayerStatus = "invited"

    model_config = ConfigDict(extra="forbid")

    @field_validator("full_name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "full_name")


class EventPlayerUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=254)
    handicap: Optional[float] = Field(default=None, ge=-10, le=54)
    bio: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[PlayerStatus] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("full_name", "status", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("field must not be null")
        if isinstance(value, str):
            return _strip_required(value, "field")
        return value

    @model_validator(mode="after")
    def _ensure_fields(self) -> "EventPlayerUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field is required")
        return self


class EventPlayerOut(BaseModel):
    id: str
    full_name: str
    email: Optional[str] = None
    handicap: Optional[float] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    status: PlayerStatus


class PublicPlayerOut(BaseModel):
    id: str
    full_name: str
    handicap: Optional[float] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None


class EventRoundCreate(BaseModel):
    course_name: str = Field(..., min_length=1, max_length=200)
    round_date: Optional[date] = None
    tee_time: Optional[str] = Field(default=None, max_length=20)
    scoring_type: ScoringType = "stroke_play"
    holes: int = Field(default=18, ge=1, le=36)
    round_number: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")

    @field_validator("course_name", mode="before")
    @classmethod
    def _validate_course(cls, value: str) -> str:
        return _strip_required(value, "course_name")


class EventRoundOut(BaseModel):
    id: str
    course_name: str
    round_date: Optional[date] = None
    tee_time: Optional[str] = None
    scoring_type: str
    holes: int
    round_number: int


class SkillsContestCreate(BaseModel):
    hole: int = Field(..., ge=1, le=36)
    contest_type: ContestType


class SkillsContestOut(BaseModel):
    id: str
    round_id: str
    hole: int
    contest_type: ContestType
    winner_id: Optional[str] = None


# ---------------------------------------------------------------------------
# courses
# ---------------------------------------------------------------------------

class HoleIn(BaseModel):
    hole_number: int = Field(..., ge=1, le=36)
    par: Optional[int] = Field(default=None, ge=3, le=6)
    yardage: Optional[int] = Field(default=None, ge=0)
    handicap: Optional[int] = Field(default=None, ge=1, le=36)


class CourseHolesIn(BaseModel):
    holes: List[HoleIn] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _unique_holes(self) -> "CourseHolesIn":
        numbers = [hole.hole_number for hole in self.holes]
        if len(numbers) != len(set(numbers)):
            raise ValueError("hole numbers must be unique")
        return self


class HoleOut(BaseModel):
    number: int
    par: Optional[int] = None
    yardage: Optional[int] = None
    handicap: Optional[int] = None


class CourseHolesOut(BaseModel):
    course_name: str
    has_par: bool
    total_par: Optional[int] = None
    holes: List[HoleOut]


# ---------------------------------------------------------------------------
# clubhouse
# ---------------------------------------------------------------------------

class ClubhousePasswordIn(BaseModel):
    password: str = Field(..., min_length=1)


class ClubhouseVerifyOut(BaseModel):
    valid: bool = True
    event_id: str
    event_name: str


class ClubhouseSessionCreate(ClubhousePasswordIn):
    display_name: str = Field(..., min_length=1, max_length=CLUBHOUSE_DISPLAY_NAME_MAX)

    @field_validator("display_name", mode="before")
    @classmethod
    def _validate_display_name(cls, value: str) -> str:
        return _strip_required(value, "display_name")


class ClubhouseSessionOut(BaseModel):
    session_id: str
    display_name: str
    event_id: str
    last_accessed: Optional[datetime] = None


class ClubhouseSessionStatus(BaseModel):
    valid: bool
    display_name: Optional[str] = None


# ---------------------------------------------------------------------------
# scorecards
# ---------------------------------------------------------------------------

Strokes = Annotated[int, Field(ge=MIN_STROKES, le=MAX_STROKES)]


class AdjustStrokesIn(BaseModel):
    op: Literal["adjust"]
    player_id: str
    hole: int = Field(..., ge=1)
    delta: int = Field(..., ge=-MAX_STROKES, le=MAX_STROKES)


class SetStrokesIn(BaseModel):
    op: Literal["set"]
    player_id: str
    hole: int = Field(..., ge=1)
    strokes: Strokes


ScoreMutationIn = Annotated[
    Union[AdjustStrokesIn, SetStrokesIn], Field(discriminator="op")
]


class ScoreMutationsIn(BaseModel):
    mutations: List[ScoreMutationIn] = Field(..., min_length=1)


class PlayerScoresIn(BaseModel):
    player_id: str
    strokes: List[Strokes]
    versions: Optional[List[Optional[int]]] = None

    @model_validator(mode="after")
    def _aligned(self) -> "PlayerScoresIn":
        if self.versions is not None and len(self.versions) != len(self.strokes):
            raise ValueError("versions must have one entry per hole")
        return self


class ScorecardSaveIn(BaseModel):
    players: List[PlayerScoresIn] = Field(..., min_length=1)
    check_versions: Optional[bool] = None

    @model_validator(mode="after")
    def _unique_players(self) -> "ScorecardSaveIn":
        ids = [p.player_id for p in self.players]
        if len(ids) != len(set(ids)):
            raise ValueError("each player may appear once")
        return self

    @property
    def wants_version_check(self) -> bool:
        if self.check_versions is not None:
            return self.check_versions
        return any(p.versions is not None for p in self.players)


class HoleEditIn(BaseModel):
    """Hole-level editor: strokes for every player plus contest winners."""
    scores: Dict[str, Strokes] = Field(default_factory=dict)
    contest_winners: Dict[str, Optional[str]] = Field(default_factory=dict)


class PlayerScoresOut(BaseModel):
    player_id: str
    name: str
    strokes: List[int]
    versions: List[Optional[int]]
    total_strokes: int
    total_par: Optional[int] = None
    differential: Optional[int] = None
    display: str


class ScorecardOut(BaseModel):
    event_id: str
    round: EventRoundOut
    course_name: str
    has_par: bool
    total_par: Optional[int] = None
    holes: List[HoleOut]
    players: List[PlayerScoresOut]
    contests: List[SkillsContestOut] = Field(default_factory=list)
    writer: Optional[str] = None


class ScorecardSaveOut(BaseModel):
    updated: int
    inserted: int
    scorecard: ScorecardOut


# ---------------------------------------------------------------------------
# leaderboard & public site
# ---------------------------------------------------------------------------

class LeaderboardRowOut(BaseModel):
    position: int
    player_id: str
    name: str
    strokes: List[int]
    bands: List[Optional[str]]
    total_strokes: int
    total_par: Optional[int] = None
    differential: Optional[int] = None
    display: str
    holes_played: int


class RoundLeaderboardOut(BaseModel):
    round_id: str
    round_number: int
    course_name: str
    round_date: Optional[date] = None
    has_par: bool
    total_par: Optional[int] = None
    holes: List[HoleOut]
    rows: List[LeaderboardRowOut]


class EventLeaderboardOut(BaseModel):
    event: PublicEventOut
    rounds: List[RoundLeaderboardOut]


class EventCourseOut(BaseModel):
    id: str
    name: str
    par: Optional[int] = None
    yardage: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class EventPrizeOut(BaseModel):
    id: str
    category: str
    description: Optional[str] = None
    amount: Optional[float] = None


class EventTravelOut(BaseModel):
    id: str
    flight_info: Optional[str] = None
    accommodations: Optional[str] = None
    daily_schedule: Optional[str] = None


class EventRuleOut(BaseModel):
    id: str
    rule_text: str


class EventCustomizationOut(BaseModel):
    theme: str = "default"
    home_headline: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class EventSiteOut(BaseModel):
    event: PublicEventOut
    players: List[PublicPlayerOut]
    rounds: List[EventRoundOut]
    courses: List[EventCourseOut]
    prizes: List[EventPrizeOut]
    travel: List[EventTravelOut]
    rules: List[EventRuleOut]
    customization: Optional[EventCustomizationOut] = None
