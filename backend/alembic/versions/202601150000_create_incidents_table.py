"""Create incidents table

Revision ID: 202601150000
Revises: 
Create Date: 2026-01-15 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '202601150000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'incidents',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('incident_start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('incident_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('open', 'closed', name='incident_status', native_enum=False, length=16),
            nullable=False,
            server_default='open',
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_incidents_created_at', 'incidents', ['created_at'])
    op.create_index('ix_incidents_status', 'incidents', ['status'])


def downgrade() -> None:
    op.drop_index('ix_incidents_status', table_name='incidents')
    op.drop_index('ix_incidents_created_at', table_name='incidents')
    op.drop_table('incidents')
