"""rewards, redemptions and points ledger

Revision ID: 5e1d0c7a9b21
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5e1d0c7a9b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(bind, table_name: str) -> bool:
    insp = sa.inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    bind = op.get_bind()

    if not _table_exists(bind, "rewards"):
        op.create_table(
            "rewards",
            sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("description", sa.String(length=1000), nullable=False),
            sa.Column("category", sa.String(length=20), nullable=False, server_default="other"),
            sa.Column("points_cost", sa.Integer(), nullable=False),
            sa.Column("image_url", sa.String(length=500), nullable=True),
            sa.Column("code", sa.String(length=100), nullable=True),
            sa.Column("valid_from", sa.TIMESTAMP(), nullable=True),
            sa.Column("valid_until", sa.TIMESTAMP(), nullable=True),
            sa.Column("validity_days", sa.Integer(), nullable=True),
            sa.Column("quantity", sa.Integer(), nullable=False, server_default="-1"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_by", sa.String(length=100), nullable=True),
            sa.Column("created_at", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
            sa.Column("updated_at", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
            sa.UniqueConstraint("name", name="uq_rewards_name"),
            sa.CheckConstraint("points_cost > 0", name="ck_rewards_points_cost_positive"),
            sa.CheckConstraint("quantity >= -1", name="ck_rewards_quantity_min"),
        )

    if not _table_exists(bind, "redemptions"):
        op.create_table(
            "redemptions",
            sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
            sa.Column("user_id", sa.String(length=100), nullable=False),
            sa.Column("reward_id", sa.Uuid(as_uuid=True), sa.ForeignKey("rewards.id"), nullable=False),
            sa.Column("points_spent", sa.Integer(), nullable=False),
            sa.Column("redemption_code", sa.String(length=32), nullable=False),
            sa.Column("redeemed_at", sa.TIMESTAMP(), nullable=False),
            sa.Column("expires_at", sa.TIMESTAMP(), nullable=False),
            sa.Column("is_used", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("used_at", sa.TIMESTAMP(), nullable=True),
            sa.Column("used_by", sa.String(length=100), nullable=True),
            sa.Column("created_at", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
            sa.UniqueConstraint("redemption_code", name="uq_redemptions_redemption_code"),
        )
        op.create_index("ix_redemptions_user_id", "redemptions", ["user_id"])

    if not _table_exists(bind, "user_points"):
        op.create_table(
            "user_points",
            sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
            sa.Column("user_id", sa.String(length=100), nullable=False),
            sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
            sa.Column("updated_at", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
            sa.UniqueConstraint("user_id", name="uq_user_points_user_id"),
            sa.CheckConstraint("total_points >= 0", name="ck_user_points_total_non_negative"),
        )

    if not _table_exists(bind, "point_movements"):
        op.create_table(
            "point_movements",
            sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
            sa.Column("user_id", sa.String(length=100), nullable=False),
            sa.Column("points", sa.Integer(), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False),
            sa.Column("description", sa.String(length=255), nullable=True),
            sa.Column(
                "source_redemption_id",
                sa.Uuid(as_uuid=True),
                sa.ForeignKey("redemptions.id"),
                nullable=True,
            ),
            sa.Column("created_at", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_point_movements_user_id", "point_movements", ["user_id"])


def downgrade() -> None:
    bind = op.get_bind()

    for table in ("point_movements", "user_points", "redemptions", "rewards"):
        if _table_exists(bind, table):
            op.drop_table(table)
