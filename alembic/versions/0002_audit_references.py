"""audit rows reference the acting user, contract and project

Revision ID: 0002_audit_references
Revises: 0001_initial_schema
Create Date: 2026-10-18 12:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_audit_references"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("audit_logs") as batch:
        batch.add_column(sa.Column("actor_user_id", sa.Integer(), nullable=True))
        batch.add_column(sa.Column("contract_id", sa.Integer(), nullable=True))
        batch.add_column(sa.Column("project_id", sa.Integer(), nullable=True))
        batch.create_foreign_key(
            "fk_audit_logs_actor_user_id_users", "users", ["actor_user_id"], ["id"], ondelete="SET NULL"
        )
        batch.create_index("ix_audit_logs_contract_id", ["contract_id"])
        batch.create_index("ix_audit_logs_project_id", ["project_id"])
        batch.create_index("ix_audit_logs_entity", ["entity", "entity_id"])


def downgrade() -> None:
    with op.batch_alter_table("audit_logs") as batch:
        batch.drop_index("ix_audit_logs_entity")
        batch.drop_index("ix_audit_logs_project_id")
        batch.drop_index("ix_audit_logs_contract_id")
        batch.drop_constraint("fk_audit_logs_actor_user_id_users", type_="foreignkey")
        batch.drop_column("project_id")
        batch.drop_column("contract_id")
        batch.drop_column("actor_user_id")
