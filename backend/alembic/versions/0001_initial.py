from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _event_fk():
    return sa.ForeignKey("events.id", ondelete="CASCADE")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_users_email_lower", "users", [sa.text("lower(email)")], unique=True
    )
    op.create_table(
        "events",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False, unique=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "event_rounds",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column("course_name", sa.String(), nullable=False),
        sa.Column("round_date", sa.Date(), nullable=True),
        sa.Column("tee_time", sa.String(), nullable=True),
        sa.Column("scoring_type", sa.String(), nullable=False, server_default="stroke_play"),
        sa.Column("holes", sa.Integer(), nullable=False, server_default="18"),
        sa.Column("round_number", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_table(
        "event_players",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("handicap", sa.Float(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_image", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="invited"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "event_courses",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("par", sa.Integer(), nullable=True),
        sa.Column("yardage", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "event_prizes",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Float(), nullable=True),
    )
    op.create_table(
        "event_travel",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column("flight_info", sa.Text(), nullable=True),
        sa.Column("accommodations", sa.Text(), nullable=True),
        sa.Column("daily_schedule", sa.Text(), nullable=True),
    )
    op.create_table(
        "event_rules",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column("rule_text", sa.Text(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "event_customization",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False, unique=True),
        sa.Column("theme", sa.String(), nullable=False, server_default="default"),
        sa.Column("home_headline", sa.String(), nullable=True),
        sa.Column("settings", sa.JSON(), nullable=True),
    )
    op.create_table(
        "course_holes",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("course_name", sa.String(), nullable=False),
        sa.Column("hole_number", sa.Integer(), nullable=False),
        sa.Column("par", sa.Integer(), nullable=True),
        sa.Column("yardage", sa.Integer(), nullable=True),
        sa.Column("handicap", sa.Integer(), nullable=True),
        sa.UniqueConstraint(
            "course_name", "hole_number", name="uq_course_holes_course_name_hole_number"
        ),
    )
    op.create_table(
        "scorecards",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column(
            "event_round_id",
            sa.String(),
            sa.ForeignKey("event_rounds.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "event_player_id",
            sa.String(),
            sa.ForeignKey("event_players.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("hole_number", sa.Integer(), nullable=False),
        sa.Column("strokes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "event_round_id",
            "event_player_id",
            "hole_number",
            name="uq_scorecards_round_player_hole",
        ),
    )
    op.create_index(
        "ix_scorecards_event_round", "scorecards", ["event_id", "event_round_id"]
    )
    op.create_table(
        "skills_contests",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("event_id", sa.String(), _event_fk(), nullable=False),
        sa.Column(
            "round_id",
            sa.String(),
            sa.ForeignKey("event_rounds.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("hole", sa.Integer(), nullable=False),
        sa.Column("contest_type", sa.String(), nullable=False),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("event_players.id"), nullable=True),
    )


def downgrade():
    op.drop_table("skills_contests")
    op.drop_index("ix_scorecards_event_round", table_name="scorecards")
    op.drop_table("scorecards")
    op.drop_table("course_holes")
    op.drop_table("event_customization")
    op.drop_table("event_rules")
    op.drop_table("event_travel")
    op.drop_table("event_prizes")
    op.drop_table("event_courses")
    op.drop_table("event_players")
    op.drop_table("event_rounds")
    op.drop_table("events")
    op.drop_index("uq_users_email_lower", table_name="users")
    op.drop_table("users")
