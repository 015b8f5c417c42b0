"""booking schema

Revision ID: 5b1d0c7e2a94
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5b1d0c7e2a94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table('services',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_eur', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('duration_min', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('duration_min > 0', name='ck_services_duration_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_services_is_active'), 'services', ['is_active'], unique=False)

    op.create_table('working_hours',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_working_hours_weekday'),
        sa.CheckConstraint('start_time < end_time', name='ck_working_hours_order'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'uq_working_hours_active_weekday', 'working_hours', ['weekday'],
        unique=True, postgresql_where=sa.text('is_active')
    )

    op.create_table('date_overrides',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("kind IN ('closed', 'custom_hours')", name='ck_date_overrides_kind'),
        sa.CheckConstraint(
            "kind = 'closed' OR (start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name='ck_date_overrides_custom_hours'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('date')
    )

    op.create_table('customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone_e164', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('phone_e164')
    )

    op.create_table('bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('service_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('start_time_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_via', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('manage_token', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('start_time_utc < end_time_utc', name='ck_bookings_time_order'),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name='ck_bookings_status'),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('manage_token')
    )
    op.create_index(
        'ix_bookings_status_time', 'bookings',
        ['status', 'start_time_utc', 'end_time_utc'], unique=False
    )

    # Confirmed bookings never overlap; half-open so back-to-back slots are allowed
    op.execute("""
        ALTER TABLE bookings
        ADD CONSTRAINT bookings_no_overlap
        EXCLUDE USING gist (tstzrange(start_time_utc, end_time_utc, '[)') WITH &&)
        WHERE (status = 'confirmed');
    """)

    op.create_table('booking_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_booking_logs_booking_id'), 'booking_logs', ['booking_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    # Drop tables in reverse order (due to foreign keys)
    op.drop_index(op.f('ix_booking_logs_booking_id'), table_name='booking_logs')
    op.drop_table('booking_logs')

    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS bookings_no_overlap;")
    op.drop_index('ix_bookings_status_time', table_name='bookings')
    op.drop_table('bookings')

    op.drop_table('customers')
    op.drop_table('date_overrides')

    op.drop_index('uq_working_hours_active_weekday', table_name='working_hours')
    op.drop_table('working_hours')

    op.drop_index(op.f('ix_services_is_active'), table_name='services')
    op.drop_table('services')
