"""initial okfees schema

Revision ID: okfees_initial_schema
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'okfees_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def _owner():
    return sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=120), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('login_attempts', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('last_login_attempt', sa.DateTime(), nullable=True),
        sa.Column('is_locked', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('lock_until', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=True),
        sa.Column('institute_name', sa.String(length=160), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('whatsapp_number', sa.String(length=32), nullable=True),
        sa.Column('whatsapp_group_link', sa.String(length=500), nullable=True),
        *_timestamps()
    )

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), primary_key=True),
        _owner(),
        sa.Column('student_code', sa.String(length=32), nullable=False, unique=True),
        sa.Column('code_number', sa.Integer(), nullable=False, unique=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('batch', sa.String(length=80), nullable=True),
        sa.Column('fee_amount', sa.Float(), nullable=True),
        sa.Column('fee_paid', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=True, server_default='active'),
        sa.Column('enrollment_date', sa.Date(), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_students_user_id', 'students', ['user_id'])

    op.create_table(
        'fee_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        _owner(),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('amount_paid', sa.Float(), nullable=False, server_default='0'),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(length=40), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_fee_payments_user_id', 'fee_payments', ['user_id'])

    op.create_table(
        'announcements',
        sa.Column('id', sa.Integer(), primary_key=True),
        _owner(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('media_url', sa.String(length=500), nullable=True),
        sa.Column('media_type', sa.String(length=10), nullable=True, server_default='none'),
        sa.Column('batch', sa.String(length=80), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_announcements_user_id', 'announcements', ['user_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        _owner(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_events_user_id', 'events', ['user_id'])

    op.create_table(
        'live_classes',
        sa.Column('id', sa.Integer(), primary_key=True),
        _owner(),
        sa.Column('class_name', sa.String(length=120), nullable=False),
        sa.Column('subject', sa.String(length=120), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('timing', sa.String(length=80), nullable=False),
        sa.Column('fee', sa.Float(), nullable=False, server_default='0'),
        sa.Column('teacher_name', sa.String(length=120), nullable=False),
        sa.Column('teacher_image_url', sa.String(length=500), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_live_classes_user_id', 'live_classes', ['user_id'])

    op.create_table(
        'topper_students',
        sa.Column('id', sa.Integer(), primary_key=True),
        _owner(),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('class_name', sa.String(length=80), nullable=False),
        sa.Column('marks', sa.String(length=40), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_topper_students_user_id', 'topper_students', ['user_id'])

    op.create_table(
        'institute_info',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('location', sa.String(length=300), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('teacher_names', sa.String(length=300), nullable=True),
        sa.Column('map_link', sa.String(length=500), nullable=True),
        sa.Column('hero_image_url', sa.String(length=500), nullable=True),
        *_timestamps()
    )

    op.create_table(
        'student_summary',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('summary', sa.Text(), nullable=False),
        *_timestamps()
    )

    op.create_table(
        'recovery_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('code_hash', sa.String(length=256), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('used_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'user_activity',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('activity_type', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )


def downgrade():
    for table in ('user_activity', 'recovery_codes', 'student_summary', 'institute_info', 'topper_students',
                  'live_classes', 'events', 'announcements', 'fee_payments', 'students', 'profiles', 'user'):
        op.drop_table(table)
