"""initial backoffice schema

Revision ID: 3f0b6c1d2a90
Revises:
Create Date: 2026-10-19 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f0b6c1d2a90'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


room_status = sa.Enum(
    'available', 'booked', 'maintenance',
    name='room_status', native_enum=False, length=20,
)
booking_status = sa.Enum(
    'Confirmed', 'Checked-in', 'Checked-out', 'Cancelled',
    name='booking_status', native_enum=False, length=20,
)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'room_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price_per_night', sa.Numeric(10, 2), nullable=False),
        sa.Column('capacity_adults', sa.Integer(), nullable=False),
        sa.Column('capacity_children', sa.Integer(), nullable=False),
        sa.CheckConstraint('price_per_night >= 0', name='ck_room_types_price_non_negative'),
        sa.CheckConstraint('capacity_adults >= 0', name='ck_room_types_adults_non_negative'),
        sa.CheckConstraint('capacity_children >= 0', name='ck_room_types_children_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_number', sa.String(length=20), nullable=False),
        sa.Column('room_type_id', sa.Integer(), nullable=False),
        sa.Column('status', room_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['room_type_id'], ['room_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_rooms_room_number', 'rooms', ['room_number'], unique=True)
    op.create_index('ix_rooms_room_type_id', 'rooms', ['room_type_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('room_type_id', sa.Integer(), nullable=False),
        sa.Column('room_number', sa.String(length=20), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('adults', sa.Integer(), nullable=False),
        sa.Column('children', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_status', sa.String(length=32), nullable=False),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=True),
        sa.Column('check_out_time', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('check_out > check_in', name='ck_bookings_dates_ordered'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['room_type_id'], ['room_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
    op.create_index('ix_bookings_room_type_id', 'bookings', ['room_type_id'])
    op.create_index('ix_bookings_room_number', 'bookings', ['room_number'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])

    # No foreign keys: log rows outlive the bookings and rooms they describe
    op.create_table(
        'booking_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=False),
        sa.Column('guest_name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('room', sa.String(length=120), nullable=False),
        sa.Column('room_number', sa.String(length=20), nullable=False),
        sa.Column('room_type', sa.String(length=100), nullable=False),
        sa.Column('payment_status', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('check_in', sa.DateTime(), nullable=True),
        sa.Column('check_out', sa.DateTime(), nullable=True),
        sa.Column('last_action', sa.String(length=20), nullable=False),
        sa.Column('action_timestamp', sa.DateTime(), nullable=False),
        sa.Column('performed_by', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_booking_logs_booking_id', 'booking_logs', ['booking_id'])
    op.create_index('ix_booking_logs_status', 'booking_logs', ['status'])
    op.create_index('ix_booking_logs_action_timestamp', 'booking_logs', ['action_timestamp'])


def downgrade() -> None:
    op.drop_index('ix_booking_logs_action_timestamp', table_name='booking_logs')
    op.drop_index('ix_booking_logs_status', table_name='booking_logs')
    op.drop_index('ix_booking_logs_booking_id', table_name='booking_logs')
    op.drop_table('booking_logs')

    op.drop_index('ix_bookings_status', table_name='bookings')
    op.drop_index('ix_bookings_room_number', table_name='bookings')
    op.drop_index('ix_bookings_room_type_id', table_name='bookings')
    op.drop_index('ix_bookings_user_id', table_name='bookings')
    op.drop_table('bookings')

    op.drop_index('ix_rooms_room_type_id', table_name='rooms')
    op.drop_index('ix_rooms_room_number', table_name='rooms')
    op.drop_table('rooms')

    op.drop_table('room_types')
    op.drop_table('users')
