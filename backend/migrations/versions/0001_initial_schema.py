"""users, permission overrides, audit log and catalog tables

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-10-18
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(10, 2)


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False, unique=True),
        sa.Column('email', sa.String(length=128), unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_role', 'users', ['role'])

    # one row per customizable role; absence means compiled-in defaults
    op.create_table('permission_overrides',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_name', sa.String(length=32), nullable=False, unique=True),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_permission_overrides_role_name', 'permission_overrides', ['role_name'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('actor_role', sa.String(length=32)),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_audit_actor', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_entity', 'audit_logs', ['entity', 'entity_id'])

    op.create_table('brands',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table('models',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('brand_id', sa.Integer(), sa.ForeignKey('brands.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_models_brand_id', 'models', ['brand_id'])
    op.create_table('versions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('model_id', sa.Integer(), sa.ForeignKey('models.id'), nullable=False),
        sa.Column('year', sa.Integer()),
        sa.Column('public_price', MONEY, nullable=False),
        sa.Column('pcd_ipi_icms', MONEY, nullable=False),
        sa.Column('pcd_ipi', MONEY, nullable=False),
        sa.Column('taxi_ipi_icms', MONEY, nullable=False),
        sa.Column('taxi_ipi', MONEY, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_versions_model_id', 'versions', ['model_id'])
    op.create_table('paint_types',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False, unique=True),
    )
    op.create_table('colors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('hex_code', sa.String(length=16), nullable=False),
        sa.Column('paint_type_id', sa.Integer(), sa.ForeignKey('paint_types.id')),
        sa.Column('additional_price', MONEY, nullable=False),
        sa.Column('image_url', sa.String(length=512)),
    )
    op.create_table('version_colors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('version_id', sa.Integer(), sa.ForeignKey('versions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('color_id', sa.Integer(), sa.ForeignKey('colors.id', ondelete='CASCADE'), nullable=False),
        sa.Column('price', MONEY),
        sa.Column('image_url', sa.String(length=512)),
        sa.UniqueConstraint('version_id', 'color_id', name='uq_version_color'),
    )
    op.create_index('ix_version_colors_version_id', 'version_colors', ['version_id'])
    op.create_table('optionals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.String(length=512)),
        sa.Column('price', MONEY, nullable=False),
    )
    op.create_table('version_optionals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('version_id', sa.Integer(), sa.ForeignKey('versions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('optional_id', sa.Integer(), sa.ForeignKey('optionals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('price', MONEY, nullable=False),
        sa.UniqueConstraint('version_id', 'optional_id', name='uq_version_optional'),
    )
    op.create_index('ix_version_optionals_version_id', 'version_optionals', ['version_id'])


def downgrade():
    for tbl in ['version_optionals', 'optionals', 'version_colors', 'colors', 'paint_types', 'versions',
                'models', 'brands', 'audit_logs', 'permission_overrides', 'users']:
        op.drop_table(tbl)
