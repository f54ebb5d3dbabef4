"""Initial migration - Create inspection scoring tables.

Revision ID: 001
Revises: 
Create Date: 2026-10-19 08:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create vehicles table
    op.create_table(
        'vehicles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('make', sa.String(length=100), nullable=True),
        sa.Column('model', sa.String(length=100), nullable=True),
        sa.Column('mileage', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vehicles'))
    )

    # Create shop_settings table
    op.create_table(
        'shop_settings',
        sa.Column('shop_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('include_cost_estimates', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('include_part_numbers', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('include_timeframes', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('labor_rate', sa.Float(), nullable=True),
        sa.Column('markup_percent', sa.Float(), nullable=True),
        sa.Column('urgency_thresholds', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.PrimaryKeyConstraint('shop_id', name=op.f('pk_shop_settings'))
    )

    # Create inspections table
    op.create_table(
        'inspections',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('shop_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vehicle_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='draft'),
        sa.Column('urgency_level', sa.String(length=20), nullable=True),
        sa.Column('urgency_score', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id'], name=op.f('fk_inspections_vehicle_id_vehicles')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_inspections'))
    )
    op.create_index('ix_inspections_shop_id', 'inspections', ['shop_id'])

    # Create inspection_items table
    op.create_table(
        'inspection_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('inspection_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('component', sa.String(length=200), nullable=False),
        sa.Column('condition', sa.String(length=50), nullable=True),
        sa.Column('measurements', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('recommendations', sa.Text(), nullable=True),
        sa.Column('estimated_cost', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('requires_immediate_attention', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['inspection_id'], ['inspections.id'], name=op.f('fk_inspection_items_inspection_id_inspections'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_inspection_items'))
    )
    op.create_index('ix_inspection_items_inspection_id', 'inspection_items', ['inspection_id'])
    op.create_index('ix_inspection_items_priority', 'inspection_items', ['priority'])


def downgrade() -> None:
    op.drop_index('ix_inspection_items_priority', table_name='inspection_items')
    op.drop_index('ix_inspection_items_inspection_id', table_name='inspection_items')
    op.drop_table('inspection_items')
    op.drop_index('ix_inspections_shop_id', table_name='inspections')
    op.drop_table('inspections')
    op.drop_table('shop_settings')
    op.drop_table('vehicles')
