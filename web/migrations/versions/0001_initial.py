from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32), nullable=True, unique=True),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=64), nullable=True),
        sa.Column('state', sa.String(length=64), nullable=True),
        sa.Column('zip_code', sa.String(length=16), nullable=True),
        sa.Column('country', sa.String(length=64), nullable=True),
        sa.Column('created_by_admin', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_phone', 'users', ['phone'])

    op.create_table(
        'treks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('region', sa.String(length=120), nullable=True),
        sa.Column('difficulty', sa.String(length=32), nullable=True),
        sa.Column('duration_days', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_enabled', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'batches',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trek_id', sa.Integer(), sa.ForeignKey('treks.id'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('max_participants', sa.Integer(), nullable=False),
        sa.Column('current_participants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reserved_slots', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='upcoming'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint('max_participants >= 1', name='ck_batch_max_participants'),
        sa.CheckConstraint('current_participants >= 0', name='ck_batch_current_participants'),
        sa.CheckConstraint('reserved_slots >= 0', name='ck_batch_reserved_slots'),
    )
    op.create_index('ix_batches_trek_id', 'batches', ['trek_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trek_id', sa.Integer(), sa.ForeignKey('treks.id'), nullable=False),
        sa.Column('batch_id', sa.Integer(), sa.ForeignKey('batches.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('number_of_participants', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_status', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('user_name', sa.String(length=120), nullable=False),
        sa.Column('user_email', sa.String(length=128), nullable=False),
        sa.Column('user_phone', sa.String(length=32), nullable=False),
        sa.Column('emergency_name', sa.String(length=120), nullable=True),
        sa.Column('emergency_phone', sa.String(length=32), nullable=True),
        sa.Column('emergency_relation', sa.String(length=64), nullable=True),
        sa.Column('additional_requests', sa.String(length=2000), nullable=True),
        sa.Column('created_by_admin', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sa.String(length=500), nullable=True),
        sa.Column('refund_status', sa.String(length=20), nullable=False, server_default='not_applicable'),
        sa.Column('refund_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('refund_date', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_booking_batch_status', 'bookings', ['batch_id', 'status'])

    op.create_table(
        'booking_participants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id'), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('gender', sa.String(length=8), nullable=True),
        sa.Column('medical_conditions', sa.String(length=500), nullable=True),
        sa.Column('is_cancelled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('refund_status', sa.String(length=20), nullable=False, server_default='not_applicable'),
        sa.Column('refund_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
    )
    op.create_index('ix_booking_participants_booking_id', 'booking_participants', ['booking_id'])


def downgrade() -> None:
    op.drop_index('ix_booking_participants_booking_id', table_name='booking_participants')
    op.drop_table('booking_participants')
    op.drop_index('ix_booking_batch_status', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_batches_trek_id', table_name='batches')
    op.drop_table('batches')
    op.drop_table('treks')
    op.drop_index('ix_users_phone', table_name='users')
    op.drop_table('users')
