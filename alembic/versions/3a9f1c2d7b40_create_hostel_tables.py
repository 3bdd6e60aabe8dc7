"""create_hostel_tables

Revision ID: 3a9f1c2d7b40
Revises:
Create Date: 2026-10-18

Initial schema:
- users: admin accounts and their assigned PG names
- properties: PGs with room-type templates and stored metrics
- rooms: rooms of a PG, numbered uniquely within it
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a9f1c2d7b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === USERS TABLE ===
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='viewer'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('assigned_pgs', sa.JSON, nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('last_login', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # === PROPERTIES TABLE ===
    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('location', sa.String(500), nullable=False),
        sa.Column('contact_info', sa.String(255), nullable=False, server_default=''),
        sa.Column('total_rooms', sa.Integer, nullable=False, server_default='1'),
        sa.Column('total_beds', sa.Integer, nullable=False, server_default='1'),
        sa.Column('floors', sa.Integer, nullable=False, server_default='1'),
        sa.Column('images', sa.JSON, nullable=False),
        sa.Column('amenities', sa.JSON, nullable=False),
        sa.Column('room_types', sa.JSON, nullable=False),
        sa.Column('revenue', sa.Float, nullable=False, server_default='0'),
        sa.Column('occupancy_rate', sa.Float, nullable=False, server_default='0'),
        sa.Column('monthly_rent', sa.Float, nullable=False, server_default='0'),
        sa.Column('actual_occupancy', sa.Integer, nullable=False, server_default='0'),
        sa.Column('total_capacity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('manager_id', sa.Uuid, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('manager', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_properties_name', 'properties', ['name'], unique=True)

    # === ROOMS TABLE ===
    op.create_table(
        'rooms',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('pg_id', sa.Uuid, sa.ForeignKey('properties.id'), nullable=False),
        sa.Column('number', sa.String(20), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('capacity', sa.Integer, nullable=False, server_default='1'),
        sa.Column('rent', sa.Float, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='vacant'),
        sa.Column('students', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint('pg_id', 'number', name='uq_room_number'),
    )
    op.create_index('ix_rooms_pg', 'rooms', ['pg_id'])
    op.create_index('ix_rooms_pg_type', 'rooms', ['pg_id', 'type'])


def downgrade() -> None:
    op.drop_index('ix_rooms_pg_type', table_name='rooms')
    op.drop_index('ix_rooms_pg', table_name='rooms')
    op.drop_table('rooms')
    op.drop_index('ix_properties_name', table_name='properties')
    op.drop_table('properties')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
