"""initial_schema

Revision ID: 3b7e51c0a9d2
Revises:
Create Date: 2026-10-17 09:00:00

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3b7e51c0a9d2"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Credentials (column names match the provisioning tooling)
    op.create_table(
        "journal_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("Client_Name", sa.String(), nullable=True),
        sa.Column("Personal_Email", sa.String(), nullable=True),
        sa.Column("Journal_Link", sa.Text(), nullable=True),
        sa.Column("Username", sa.Text(), nullable=True),
        sa.Column("Password", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_journal_data_Client_Name"), "journal_data", ["Client_Name"], unique=False
    )
    op.create_index(
        op.f("ix_journal_data_Personal_Email"),
        "journal_data",
        ["Personal_Email"],
        unique=False,
    )

    # Request log
    op.create_table(
        "request_logs",
        sa.Column("request_id", sa.String(), nullable=False),
        sa.Column("requester", sa.String(), nullable=True),
        sa.Column("search_query", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("queue_position", sa.Integer(), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("completion_time", sa.DateTime(), nullable=True),
        sa.Column("total_duration", sa.Float(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("request_id"),
    )
    op.create_index(
        op.f("ix_request_logs_requester"), "request_logs", ["requester"], unique=False
    )

    op.create_table(
        "journal_runs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_id", sa.String(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("completion_time", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["request_id"], ["request_logs.request_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_journal_runs_request_id"), "journal_runs", ["request_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_journal_runs_request_id"), table_name="journal_runs")
    op.drop_table("journal_runs")
    op.drop_index(op.f("ix_request_logs_requester"), table_name="request_logs")
    op.drop_table("request_logs")
    op.drop_index(op.f("ix_journal_data_Personal_Email"), table_name="journal_data")
    op.drop_index(op.f("ix_journal_data_Client_Name"), table_name="journal_data")
    op.drop_table("journal_data")
