"""initial schema: users, candidates, notifications

Revision ID: 20261019_initial
Revises: None
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=True),
        sa.Column('reset_token_hash', sa.String(length=64), nullable=True),
        sa.Column('reset_token_expires_at', sa.DateTime(), nullable=True),
        sa.Column('failed_logins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('locked_until', sa.DateTime(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_reset_token_hash', 'users', ['reset_token_hash'])

    op.create_table(
        'candidates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(length=64), nullable=True),
        sa.Column('management_token', sa.String(length=64), nullable=True),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('email', sa.String(length=254), nullable=True),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('appointment_time', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=True),
        sa.Column('action', sa.String(length=30), nullable=True),
        sa.Column('interview_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('call_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('call_started_at', sa.DateTime(), nullable=True),
        sa.Column('call_ended_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('overall_score', sa.Integer(), nullable=True),
        sa.Column('communication', sa.Integer(), nullable=True),
        sa.Column('enthusiasm', sa.Integer(), nullable=True),
        sa.Column('professionalism', sa.Integer(), nullable=True),
        sa.Column('recommendation', sa.String(length=120), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('analysis', sa.Text(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('interview_length', sa.Integer(), nullable=True),
        sa.Column('availability', sa.Text(), nullable=True),
        sa.Column('next_action', sa.Text(), nullable=True),
        sa.Column('recording_url', sa.String(length=500), nullable=True),
        sa.Column('ended_reason', sa.String(length=120), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_candidates_token', 'candidates', ['token'], unique=True)
    op.create_index('ix_candidates_management_token', 'candidates', ['management_token'], unique=True)
    op.create_index('ix_candidates_email', 'candidates', ['email'])
    op.create_index('ix_candidates_status', 'candidates', ['status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('candidate_ref', sa.String(length=64), nullable=True),
        sa.Column('kind', sa.String(length=50), nullable=True),
        sa.Column('sent_to', sa.String(length=255), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=True),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notifications_candidate_ref', 'notifications', ['candidate_ref'])


def downgrade() -> None:
    op.drop_index('ix_notifications_candidate_ref', table_name='notifications')
    op.drop_table('notifications')
    for name in ('ix_candidates_status', 'ix_candidates_email',
                 'ix_candidates_management_token', 'ix_candidates_token'):
        op.drop_index(name, table_name='candidates')
    op.drop_table('candidates')
    op.drop_index('ix_users_reset_token_hash', table_name='users')
    op.drop_table('users')
