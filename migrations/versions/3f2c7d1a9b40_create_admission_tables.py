"""create admission tables

Revision ID: 3f2c7d1a9b40
Revises:
Create Date: 2026-10-18 12:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f2c7d1a9b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'admission_sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
    )
    op.create_table(
        'majors',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('code', sa.String(), nullable=False, unique=True),
        sa.Column('name', sa.String(), nullable=False),
    )
    op.create_table(
        'students',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('id_card', sa.String(), nullable=False, unique=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('priority_points', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_table(
        'session_quotas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('admission_sessions.id'), nullable=False),
        sa.Column('major_id', sa.String(), sa.ForeignKey('majors.id'), nullable=False),
        sa.Column('admission_method', sa.String(), nullable=False),
        sa.Column('quota', sa.Integer(), nullable=False),
        sa.Column('conditions', sa.JSON(), nullable=True),
        sa.UniqueConstraint('session_id', 'major_id', 'admission_method', name='uq_quota_session_major_method'),
    )
    op.create_index('ix_session_quotas_session_id', 'session_quotas', ['session_id'])
    op.create_table(
        'applications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('admission_sessions.id'), nullable=False),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('major_id', sa.String(), sa.ForeignKey('majors.id'), nullable=False),
        sa.Column('admission_method', sa.String(), nullable=False),
        sa.Column('preference_priority', sa.Integer(), nullable=False),
        sa.Column('subject_scores', sa.JSON(), nullable=False),
        sa.Column('calculated_score', sa.Float(), nullable=True),
        sa.Column('rank_in_major', sa.Integer(), nullable=True),
        sa.Column('admission_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('rejection_reason', sa.String(), nullable=True),
        sa.UniqueConstraint('student_id', 'session_id', 'preference_priority',
                            name='uq_application_student_priority'),
    )
    op.create_index('ix_applications_session_id', 'applications', ['session_id'])
    op.create_table(
        'email_notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('admission_sessions.id'), nullable=False),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('template_name', sa.String(), nullable=False),
        sa.Column('template_data', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_email_notifications_session_id', 'email_notifications', ['session_id'])


def downgrade() -> None:
    op.drop_index('ix_email_notifications_session_id', table_name='email_notifications')
    op.drop_table('email_notifications')
    op.drop_index('ix_applications_session_id', table_name='applications')
    op.drop_table('applications')
    op.drop_index('ix_session_quotas_session_id', table_name='session_quotas')
    op.drop_table('session_quotas')
    op.drop_table('students')
    op.drop_table('majors')
    op.drop_table('admission_sessions')
