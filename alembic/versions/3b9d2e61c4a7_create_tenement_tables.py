"""create_tenement_tables

Revision ID: 3b9d2e61c4a7
Revises: 
Create Date: 2025-11-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3b9d2e61c4a7'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create tenements table
    op.create_table(
        'tenements',
        sa.Column('id', sa.String(length=36), nullable=False, comment='UUID derived from jurisdiction and tenement number'),
        sa.Column('jurisdiction', sa.String(length=3), nullable=False, comment='Jurisdiction code: WA, NSW, VIC, NT, QLD, TAS'),
        sa.Column('number', sa.String(length=100), nullable=False, comment='Jurisdiction-local tenement number'),
        sa.Column('type', sa.String(length=50), nullable=True, comment='Tenement type'),
        sa.Column('status', sa.String(length=50), nullable=True, comment='Tenement status'),
        sa.Column('holder_name', sa.String(length=255), nullable=True, comment='Primary holder'),
        sa.Column('area_ha', sa.Numeric(precision=14, scale=4), nullable=True, comment='Legal area in hectares'),
        sa.Column('grant_date', sa.Date(), nullable=True),
        sa.Column('application_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True, comment='Centroid longitude'),
        sa.Column('latitude', sa.Float(), nullable=True, comment='Centroid latitude'),
        sa.Column('geometry', postgresql.JSONB(astext_type=sa.Text()), nullable=True, comment='Source geometry'),
        sa.Column('last_sync_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of the run that last wrote this row'),
        sa.Column('source_wfs_ref', sa.Text(), nullable=True),
        sa.Column('source_mto_ref', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('jurisdiction', 'number', name='uq_tenements_jurisdiction_number'),
        sa.CheckConstraint(
            "jurisdiction IN ('WA', 'NSW', 'VIC', 'NT', 'QLD', 'TAS')",
            name='check_tenement_jurisdiction_valid'
        )
    )
    op.create_index('idx_tenements_jurisdiction', 'tenements', ['jurisdiction'], unique=False)
    op.create_index('idx_tenements_holder_name', 'tenements', ['holder_name'], unique=False)
    op.create_index('idx_tenements_expiry_date', 'tenements', ['expiry_date'], unique=False)

    # Create sync_runs table
    op.create_table(
        'sync_runs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('jurisdiction', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, comment='Run status: running, success, partial, failure, cancelled'),
        sa.Column('records_total', sa.Integer(), nullable=False),
        sa.Column('records_imported', sa.Integer(), nullable=False),
        sa.Column('records_failed', sa.Integer(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('error_details', postgresql.JSONB(astext_type=sa.Text()), nullable=True, comment='Error list collected during the run'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "status IN ('running', 'success', 'partial', 'failure', 'cancelled')",
            name='check_sync_run_status_valid'
        )
    )
    op.create_index('idx_sync_runs_jurisdiction', 'sync_runs', ['jurisdiction'], unique=False)
    op.create_index('idx_sync_runs_started_at', 'sync_runs', ['started_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_sync_runs_started_at', table_name='sync_runs')
    op.drop_index('idx_sync_runs_jurisdiction', table_name='sync_runs')
    op.drop_table('sync_runs')
    op.drop_index('idx_tenements_expiry_date', table_name='tenements')
    op.drop_index('idx_tenements_holder_name', table_name='tenements')
    op.drop_index('idx_tenements_jurisdiction', table_name='tenements')
    op.drop_table('tenements')
