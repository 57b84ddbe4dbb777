"""Create grade book tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

GRADE_LEVELS = (
    'PRIMARY_FIRST', 'PRIMARY_SECOND', 'PRIMARY_THIRD', 'PRIMARY_FOURTH', 'PRIMARY_FIFTH', 'PRIMARY_SIXTH',
    'MIDDLE_FIRST', 'MIDDLE_SECOND', 'MIDDLE_THIRD',
    'SECONDARY_FIRST', 'SECONDARY_SECOND', 'SECONDARY_THIRD',
)


def upgrade() -> None:
    grade_level = sa.Enum(*GRADE_LEVELS, name='gradelevel')

    # Create students table
    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('grade', grade_level, nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False, server_default='default'),
        sa.Column('section_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('attendance', sa.JSON(), nullable=True),
        sa.Column('performance_tasks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('participation', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('book', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('homework', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('exam1', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('exam2', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_students_cohort', 'students', ['grade', 'subject', 'section_number'], unique=False)

    # Create grade_settings table
    op.create_table(
        'grade_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('grade', postgresql.ENUM(*GRADE_LEVELS, name='gradelevel', create_type=False), nullable=False),
        sa.Column('performance_tasks_max', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('exam1_max', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('exam2_max', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_grade_settings_grade'), 'grade_settings', ['grade'], unique=True)

    # Create behavior_records table
    op.create_table(
        'behavior_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column(
            'category',
            sa.Enum('BEHAVIOR', 'DISTURBANCE', 'COOPERATION', 'CLEANLINESS', name='behaviorcategory'),
            nullable=False,
        ),
        sa.Column('stars', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'category', name='uq_behavior_student_category')
    )
    op.create_index(op.f('ix_behavior_records_student_id'), 'behavior_records', ['student_id'], unique=False)

    # Create classroom_groups table
    op.create_table(
        'classroom_groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('section_key', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_classroom_groups_section_key'), 'classroom_groups', ['section_key'], unique=False)

    # Create classroom_group_members association table
    op.create_table(
        'classroom_group_members',
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['classroom_groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('group_id', 'student_id'),
        sa.UniqueConstraint('group_id', 'student_id', name='uq_group_student')
    )

    # Create classroom_notes table
    op.create_table(
        'classroom_notes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('student_name', sa.String(length=255), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('note_type', sa.Enum('POSITIVE', 'NEGATIVE', 'GENERAL', name='notetype'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_classroom_notes_student_id'), 'classroom_notes', ['student_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_classroom_notes_student_id'), table_name='classroom_notes')
    op.drop_table('classroom_notes')
    op.drop_table('classroom_group_members')
    op.drop_index(op.f('ix_classroom_groups_section_key'), table_name='classroom_groups')
    op.drop_table('classroom_groups')
    op.drop_index(op.f('ix_behavior_records_student_id'), table_name='behavior_records')
    op.drop_table('behavior_records')
    op.drop_index(op.f('ix_grade_settings_grade'), table_name='grade_settings')
    op.drop_table('grade_settings')
    op.drop_index('ix_students_cohort', table_name='students')
    op.drop_table('students')
    sa.Enum(name='notetype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='behaviorcategory').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='gradelevel').drop(op.get_bind(), checkfirst=True)
