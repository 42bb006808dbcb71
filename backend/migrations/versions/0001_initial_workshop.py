"""initial workshop tables

Revision ID: 0001_initial_workshop
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_workshop'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_users_name', 'users', ['name'])

    op.create_table('clients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True)
    )
    op.create_index('ix_clients_name', 'clients', ['name'])

    op.create_table('etriers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('car_model', sa.String(length=120), nullable=False)
    )
    op.create_index('ix_etriers_car_model', 'etriers', ['car_model'])

    op.create_table('pieces',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('designation', sa.String(length=160), nullable=False),
        sa.Column('reference_article', sa.String(length=64), nullable=True),
        sa.Column('bar_code', sa.String(length=64), nullable=True)
    )
    op.create_index('ix_pieces_reference_article', 'pieces', ['reference_article'])
    op.create_index('ix_pieces_bar_code', 'pieces', ['bar_code'])

    op.create_table('receptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('reception_number', sa.String(length=32), nullable=True, unique=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('etrier_id', sa.Integer(), sa.ForeignKey('etriers.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('position', sa.String(length=32), nullable=False),
        sa.Column('observation', sa.Text(), nullable=False, server_default=''),
        sa.Column('etat', sa.String(length=16), nullable=False, server_default='recus'),
        sa.Column('is_returned', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('delivered', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('serial_number', sa.String(length=32), nullable=True),
        sa.Column('return_status', sa.String(length=16), nullable=False, server_default='none'),
        sa.Column('return_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_receptions_reception_number', 'receptions', ['reception_number'])
    op.create_index('ix_receptions_etat', 'receptions', ['etat'])
    op.create_index('ix_receptions_serial_number', 'receptions', ['serial_number'])

    op.create_table('reception_pieces',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('reception_id', sa.Integer(), sa.ForeignKey('receptions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('piece_id', sa.Integer(), sa.ForeignKey('pieces.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.UniqueConstraint('reception_id', 'piece_id', name='uq_reception_piece')
    )

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('actor_role', sa.String(length=16), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_audit_logs_actor_user_id', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for name in ('audit_logs', 'reception_pieces', 'receptions', 'pieces', 'etriers', 'clients', 'users'):
        op.drop_table(name)
