"""Create emissions table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 10:30:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    """Create the emissions table with its lookup indexes."""
    op.create_table('emissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('user_name', sa.String(length=120), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('activity', sa.String(length=120), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('value >= 0', name='ck_emission_value_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create indexes for the per-user time and category queries
    op.create_index('ix_emissions_user_id', 'emissions', ['user_id'], unique=False)
    op.create_index('ix_emissions_timestamp', 'emissions', ['timestamp'], unique=False)
    op.create_index('idx_emission_user_timestamp', 'emissions', ['user_id', 'timestamp'], unique=False)
    op.create_index('idx_emission_user_category', 'emissions', ['user_id', 'category'], unique=False)


def downgrade():
    """Drop the emissions table and its indexes."""
    op.drop_index('idx_emission_user_category', table_name='emissions')
    op.drop_index('idx_emission_user_timestamp', table_name='emissions')
    op.drop_index('ix_emissions_timestamp', table_name='emissions')
    op.drop_index('ix_emissions_user_id', table_name='emissions')
    op.drop_table('emissions')
