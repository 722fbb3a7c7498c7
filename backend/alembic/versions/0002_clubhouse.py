from alembic import op
import sqlalchemy as sa

revision = "0002_clubhouse"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade():
    # bcrypt hash; NULL keeps the clubhouse disabled for existing events
    op.add_column("events", sa.Column("clubhouse_password", sa.String(), nullable=True))
    op.create_table(
        "clubhouse_sessions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "event_id",
            sa.String(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("session_id", sa.String(), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_accessed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("clubhouse_sessions")
    with op.batch_alter_table("events") as batch:
        batch.drop_column("clubhouse_password")
