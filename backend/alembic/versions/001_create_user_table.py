"""Create user table and unique login index

Revision ID: 001_create_user_table
Revises:

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from app.db.types import GUID

# revision identifiers, used by Alembic.
revision: str = "001_create_user_table"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("guid", GUID(), nullable=False),
        sa.Column("login", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("gender", sa.Integer(), nullable=False),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False),
        # NULL means never modified / not revoked
        sa.Column("modified_on", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_by", sa.String(), nullable=True),
        sa.Column("revoked_on", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("guid", name="pk_user_guid"),
    )
    op.create_index(op.f("ix_user_login"), "user", ["login"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_user_login"), table_name="user")
    op.drop_table("user")
