"""initial stock and catalog schema

Revision ID: 3a1f0c9d2b7e
Revises:
Create Date: 2026-10-19 10:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3a1f0c9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tissues',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('width', sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column('composition', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tissues_name'), 'tissues', ['name'], unique=False)
    op.create_index(op.f('ix_tissues_sku'), 'tissues', ['sku'], unique=True)

    op.create_table(
        'colors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('hex', sa.String(length=9), nullable=True),
        sa.Column('lab_l', sa.Float(), nullable=True),
        sa.Column('lab_a', sa.Float(), nullable=True),
        sa.Column('lab_b', sa.Float(), nullable=True),
        sa.Column('family', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_colors_name'), 'colors', ['name'], unique=False)
    op.create_index(op.f('ix_colors_sku'), 'colors', ['sku'], unique=True)

    op.create_table(
        'links',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tissue_id', sa.String(length=36), nullable=False),
        sa.Column('color_id', sa.String(length=36), nullable=False),
        sa.Column('sku_filho', sa.String(), nullable=False),
        sa.Column('image_path', sa.String(), nullable=True),
        sa.Column('status', sa.Enum('Ativo', 'Inativo', name='linkstatus', native_enum=False, length=16), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['tissue_id'], ['tissues.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['color_id'], ['colors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tissue_id', 'color_id', name='_links_tissue_color_uc'),
    )
    op.create_index(op.f('ix_links_tissue_id'), 'links', ['tissue_id'], unique=False)
    op.create_index(op.f('ix_links_color_id'), 'links', ['color_id'], unique=False)
    op.create_index(op.f('ix_links_sku_filho'), 'links', ['sku_filho'], unique=False)

    op.create_table(
        'stock_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('link_id', sa.String(length=36), nullable=False),
        sa.Column('quantity_rolls', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity_rolls >= 0', name='ck_stock_items_quantity_non_negative'),
        sa.ForeignKeyConstraint(['link_id'], ['links.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stock_items_link_id'), 'stock_items', ['link_id'], unique=True)

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('link_id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.Enum('IN', 'OUT', 'ADJUST', name='movementtype', native_enum=False, length=8), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('old_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_stock_movements_quantity_non_negative'),
        sa.ForeignKeyConstraint(['link_id'], ['links.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stock_movements_link_id'), 'stock_movements', ['link_id'], unique=False)
    op.create_index(op.f('ix_stock_movements_created_at'), 'stock_movements', ['created_at'], unique=False)

    op.create_table(
        'app_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('value', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_app_config_id'), 'app_config', ['id'], unique=False)
    op.create_index(op.f('ix_app_config_name'), 'app_config', ['name'], unique=True)

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.String(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_log_id'), 'audit_log', ['id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('audit_log')
    op.drop_table('app_config')
    op.drop_table('stock_movements')
    op.drop_table('stock_items')
    op.drop_table('links')
    op.drop_table('colors')
    op.drop_table('tissues')
