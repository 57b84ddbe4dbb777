"""Add daily follow-up sheets

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'daily_follow_ups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('attendance', sa.JSON(), nullable=False),
        sa.Column('homework', sa.JSON(), nullable=False),
        sa.Column('participation', sa.JSON(), nullable=False),
        sa.Column('performance_tasks', sa.String(length=10), nullable=False, server_default='none'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'day', name='uq_follow_up_student_day')
    )
    op.create_index(op.f('ix_daily_follow_ups_student_id'), 'daily_follow_ups', ['student_id'], unique=False)
    op.create_index(op.f('ix_daily_follow_ups_day'), 'daily_follow_ups', ['day'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_daily_follow_ups_day'), table_name='daily_follow_ups')
    op.drop_index(op.f('ix_daily_follow_ups_student_id'), table_name='daily_follow_ups')
    op.drop_table('daily_follow_ups')
