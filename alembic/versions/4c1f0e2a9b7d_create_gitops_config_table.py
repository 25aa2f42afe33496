"""create_gitops_config_table

Revision ID: 4c1f0e2a9b7d
Revises:
Create Date: 2026-10-18 09:12:41.208114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1f0e2a9b7d'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'gitops_config',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('username', sa.String(length=250), nullable=True),
        sa.Column('token', sa.Text(), nullable=True),
        sa.Column('github_org_id', sa.String(length=250), nullable=True),
        sa.Column('gitlab_group_id', sa.String(length=250), nullable=True),
        sa.Column('host', sa.String(length=500), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_on', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_on', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gitops_config_provider', 'gitops_config', ['provider'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_gitops_config_provider', table_name='gitops_config')
    op.drop_table('gitops_config')
