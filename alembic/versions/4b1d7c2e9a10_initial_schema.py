"""initial schema: accounts, catalog, class sessions, presences

Revision ID: 4b1d7c2e9a10
Revises:
Create Date: 2026-10-17 11:20:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1d7c2e9a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

session_status = sa.Enum('planned', 'confirmed', 'completed', 'cancelled', name='session_status')
approval_status = sa.Enum('pending', 'approved', 'rejected', name='approval_status')
user_role = sa.Enum('admin', 'teacher', name='user_role')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('employee_id', sa.String(), nullable=True, unique=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'programs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
    )
    op.create_index('ix_programs_id', 'programs', ['id'])

    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
    )
    op.create_index('ix_rooms_id', 'rooms', ['id'])

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
    )
    op.create_index('ix_courses_id', 'courses', ['id'])

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('matricule', sa.String(), nullable=False, unique=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('tag_id', sa.String(), nullable=False),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('program_id', sa.Integer(), sa.ForeignKey('programs.id'), nullable=False),
    )
    op.create_index('ix_students_id', 'students', ['id'])
    op.create_index('ix_students_tag_id', 'students', ['tag_id'], unique=True)
    op.create_index('ix_students_program_id', 'students', ['program_id'])

    op.create_table(
        'class_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('room_id', sa.Integer(), sa.ForeignKey('rooms.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_minutes', sa.Integer(), nullable=False),
        sa.Column('end_minutes', sa.Integer(), nullable=False),
        sa.Column('status', session_status, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('course_id', 'date', 'start_minutes', 'room_id', name='uq_session_course_slot_room'),
    )
    op.create_index('ix_class_sessions_id', 'class_sessions', ['id'])
    op.create_index('ix_session_teacher_date', 'class_sessions', ['teacher_id', 'date'])
    op.create_index('ix_session_room_date', 'class_sessions', ['room_id', 'date'])

    op.create_table(
        'class_session_programs',
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('class_sessions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('program_id', sa.Integer(), sa.ForeignKey('programs.id'), primary_key=True),
    )

    op.create_table(
        'presences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('class_sessions.id'), nullable=False),
        sa.Column('scanned_at', sa.DateTime(), nullable=False),
        sa.Column('status', approval_status, nullable=False),
        sa.Column('approved_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('decided_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('student_id', 'session_id', name='uq_presence_student_session'),
    )
    op.create_index('ix_presences_id', 'presences', ['id'])
    op.create_index('ix_presences_session_id', 'presences', ['session_id'])


def downgrade() -> None:
    op.drop_table('presences')
    op.drop_table('class_session_programs')
    op.drop_table('class_sessions')
    op.drop_table('students')
    op.drop_table('courses')
    op.drop_table('rooms')
    op.drop_table('programs')
    op.drop_table('users')
    bind = op.get_bind()
    approval_status.drop(bind, checkfirst=True)
    session_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
