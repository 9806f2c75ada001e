"""create_attendance_tables

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2025-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

attendance_status_enum = sa.Enum(
    'present', 'absent', 'holiday', name='attendance_status_enum'
)


def upgrade() -> None:
    """Upgrade schema - Add hierarchy, student, attendance, holiday and RBAC tables."""

    op.create_table(
        'colleges',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'course_branches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('admission_number', sa.String(length=64), nullable=False),
        sa.Column('student_name', sa.String(length=255), nullable=True),
        sa.Column('college', sa.String(length=255), nullable=True),
        sa.Column('course', sa.String(length=255), nullable=True),
        sa.Column('branch', sa.String(length=255), nullable=True),
        sa.Column('batch', sa.String(length=32), nullable=True),
        sa.Column('current_year', sa.String(length=16), nullable=True),
        sa.Column('current_semester', sa.String(length=16), nullable=True),
        sa.Column('student_status', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_students_admission_number'), 'students', ['admission_number'], unique=True
    )
    op.create_index(op.f('ix_students_college'), 'students', ['college'], unique=False)
    op.create_index(
        op.f('ix_students_student_status'), 'students', ['student_status'], unique=False
    )

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('admission_number', sa.String(length=64), nullable=True),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column('status', attendance_status_enum, nullable=True),
        sa.Column('marked_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'student_id', 'attendance_date', name='uq_student_attendance_date'
        ),
    )
    op.create_index(
        op.f('ix_attendance_records_student_id'), 'attendance_records', ['student_id'], unique=False
    )
    op.create_index(
        op.f('ix_attendance_records_attendance_date'), 'attendance_records', ['attendance_date'], unique=False
    )

    op.create_table(
        'custom_holidays',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('holiday_date', sa.Date(), nullable=False),
        sa.Column('title', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('holiday_date'),
    )

    op.create_table(
        'rbac_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=64), nullable=False),
        sa.Column('college_id', sa.Integer(), nullable=True),
        sa.Column('course_id', sa.Integer(), nullable=True),
        sa.Column('branch_id', sa.Integer(), nullable=True),
        sa.Column('college_ids', sa.JSON(), nullable=True),
        sa.Column('course_ids', sa.JSON(), nullable=True),
        sa.Column('branch_ids', sa.JSON(), nullable=True),
        sa.Column('all_courses', sa.Boolean(), nullable=True),
        sa.Column('all_branches', sa.Boolean(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rbac_users_email'), 'rbac_users', ['email'], unique=False)
    op.create_index(op.f('ix_rbac_users_role'), 'rbac_users', ['role'], unique=False)


def downgrade() -> None:
    """Downgrade schema - Drop attendance tables."""
    op.drop_index(op.f('ix_rbac_users_role'), table_name='rbac_users')
    op.drop_index(op.f('ix_rbac_users_email'), table_name='rbac_users')
    op.drop_table('rbac_users')
    op.drop_table('custom_holidays')
    op.drop_index(op.f('ix_attendance_records_attendance_date'), table_name='attendance_records')
    op.drop_index(op.f('ix_attendance_records_student_id'), table_name='attendance_records')
    op.drop_table('attendance_records')
    attendance_status_enum.drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f('ix_students_student_status'), table_name='students')
    op.drop_index(op.f('ix_students_college'), table_name='students')
    op.drop_index(op.f('ix_students_admission_number'), table_name='students')
    op.drop_table('students')
    op.drop_table('course_branches')
    op.drop_table('courses')
    op.drop_table('colleges')
