"""add course_programs link table

Revision ID: 9e6a2f4c1d37
Revises: 4b1d7c2e9a10
Create Date: 2026-10-17 16:05:12.481203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '9e6a2f4c1d37'
down_revision: Union[str, None] = '4b1d7c2e9a10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'course_programs',
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('program_id', sa.Integer(), sa.ForeignKey('programs.id'), primary_key=True),
    )

def downgrade():
    op.drop_table('course_programs')
