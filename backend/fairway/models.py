from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Float,
    Boolean,
    Text,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from .db import Base


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True)
    email = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("uq_users_email_lower", func.lower(email), unique=True),
    )


class Event(Base):
    __tablename__ = "events"
    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    location = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    logo_url = Column(String, nullable=True)
    is_private = Column(Boolean, nullable=False, default=False)
    is_published = Column(Boolean, nullable=False, default=False)
    # bcrypt hash; NULL means the clubhouse is disabled for the event
    clubhouse_password = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)


class EventRound(Base):
    __tablename__ = "event_rounds"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    course_name = Column(String, nullable=False)
    round_date = Column(Date, nullable=True)
    tee_time = Column(String, nullable=True)
    scoring_type = Column(String, nullable=False, default="stroke_play")
    holes = Column(Integer, nullable=False, default=18)
    round_number = Column(Integer, nullable=False, default=1)


class EventPlayer(Base):
    __tablename__ = "event_players"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id"), nullable=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    handicap = Column(Float, nullable=True)
    bio = Column(Text, nullable=True)
    profile_image = Column(String, nullable=True)
    status = Column(String, nullable=False, default="invited")  # invited | accepted | declined
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class EventCourse(Base):
    __tablename__ = "event_courses"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    par = Column(Integer, nullable=True)
    yardage = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)


class EventPrize(Base):
    __tablename__ = "event_prizes"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Float, nullable=True)


class EventTravel(Base):
    __tablename__ = "event_travel"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    flight_info = Column(Text, nullable=True)
    accommodations = Column(Text, nullable=True)
    daily_schedule = Column(Text, nullable=True)


class EventRule(Base):
    __tablename__ = "event_rules"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    rule_text = Column(Text, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)


class EventCustomization(Base):
    __tablename__ = "event_customization"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True)
    theme = Column(String, nullable=False, default="default")
    home_headline = Column(String, nullable=True)
    settings = Column(JSON, nullable=True)


class CourseHole(Base):
    __tablename__ = "course_holes"
    id = Column(String, primary_key=True)
    course_name = Column(String, nullable=False)
    hole_number = Column(Integer, nullable=False)
    par = Column(Integer, nullable=True)
    yardage = Column(Integer, nullable=True)
    handicap = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "course_name", "hole_number", name="uq_course_holes_course_name_hole_number"
        ),
    )


class Scorecard(Base):
    """One player's strokes on one hole of one round."""

    __tablename__ = "scorecards"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    event_round_id = Column(
        String, ForeignKey("event_rounds.id", ondelete="CASCADE"), nullable=False
    )
    event_player_id = Column(
        String, ForeignKey("event_players.id", ondelete="CASCADE"), nullable=False
    )
    hole_number = Column(Integer, nullable=False)
    strokes = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "event_round_id",
            "event_player_id",
            "hole_number",
            name="uq_scorecards_round_player_hole",
        ),
        Index("ix_scorecards_event_round", "event_id", "event_round_id"),
    )


class SkillsContest(Base):
    __tablename__ = "skills_contests"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    round_id = Column(String, ForeignKey("event_rounds.id", ondelete="CASCADE"), nullable=False)
    hole = Column(Integer, nullable=False)
    contest_type = Column(String, nullable=False)  # longest_drive | closest_to_pin
    winner_id = Column(String, ForeignKey("event_players.id"), nullable=True)


class ClubhouseSession(Base):
    __tablename__ = "clubhouse_sessions"
    id = Column(String, primary_key=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(String, nullable=False, unique=True)
    display_name = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_accessed = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
