"""Create initial schema

Revision ID: 20251110_0001
Revises: 
Create Date: 2025-11-10 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '20251110_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False

def upgrade() -> None:
    bind = op.get_bind()

    # Create users table
    if not _has_table(bind, 'users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=150), nullable=False),
            sa.Column('hashed_password', sa.String(length=255), nullable=False),
            sa.Column('role', sa.String(length=50), server_default='owner', nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    # Create villas table
    if not _has_table(bind, 'villas'):
        op.create_table('villas',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('location', sa.String(length=300), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )

    # Create rooms table
    if not _has_table(bind, 'rooms'):
        op.create_table('rooms',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('villa_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('capacity', sa.Integer(), server_default='2', nullable=False),
            sa.Column('status', sa.String(length=20), server_default='available', nullable=False),
            sa.ForeignKeyConstraint(['villa_id'], ['villas.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_rooms_villa_id'), 'rooms', ['villa_id'], unique=False)
        op.create_index('ix_rooms_status', 'rooms', ['status'], unique=False)

    # Create reservations table
    if not _has_table(bind, 'reservations'):
        op.create_table('reservations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('guest_name', sa.String(length=200), nullable=False),
            sa.Column('check_in', sa.DateTime(), nullable=False),
            sa.Column('check_out', sa.DateTime(), nullable=False),
            sa.Column('status', sa.String(length=20), server_default='booked', nullable=False),
            sa.Column('nationality', sa.String(length=100), nullable=True),
            sa.Column('passport_number', sa.String(length=100), nullable=True),
            sa.Column('num_guests', sa.Integer(), nullable=True),
            sa.Column('source', sa.String(length=100), nullable=True),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('payment_method', sa.String(length=50), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.CheckConstraint('check_in < check_out', name='ck_reservations_stay_order'),
        )
        op.create_index(op.f('ix_reservations_id'), 'reservations', ['id'], unique=False)
        op.create_index(op.f('ix_reservations_room_id'), 'reservations', ['room_id'], unique=False)
        op.create_index(op.f('ix_reservations_check_in'), 'reservations', ['check_in'], unique=False)
        op.create_index(op.f('ix_reservations_check_out'), 'reservations', ['check_out'], unique=False)
        # composite index helps overlap searches
        op.create_index('ix_reservations_room_checkin_checkout', 'reservations', ['room_id', 'check_in', 'check_out'], unique=False)

    # Create reservation_histories table
    if not _has_table(bind, 'reservation_histories'):
        op.create_table('reservation_histories',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('reservation_id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('guest_name', sa.String(length=200), nullable=False),
            sa.Column('check_in', sa.DateTime(), nullable=False),
            sa.Column('check_out', sa.DateTime(), nullable=False),
            sa.Column('status_at_checkout', sa.String(length=20), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_reservation_histories_reservation_id'), 'reservation_histories', ['reservation_id'], unique=False)
        op.create_index(op.f('ix_reservation_histories_room_id'), 'reservation_histories', ['room_id'], unique=False)
        op.create_index('ix_reservation_histories_room_checkout', 'reservation_histories', ['room_id', 'check_out'], unique=False)


def downgrade() -> None:
    op.drop_table('reservation_histories')
    op.drop_table('reservations')
    op.drop_table('rooms')
    op.drop_table('villas')
    op.drop_table('users')
