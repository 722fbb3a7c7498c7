from alembic import op
import sqlalchemy as sa

revision = "0003_scorecard_version"
down_revision = "0002_clubhouse"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column(
        "scorecards",
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    )


def downgrade():
    with op.batch_alter_table("scorecards") as batch:
        batch.drop_column("version")
