"""Create students table

Revision ID: 001
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Accounts are provisioned externally; matric doubles as login username
    op.create_table(
        'students',
        sa.Column('matric', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), server_default='STUDENT', nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('paid', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('matric'),
        sa.CheckConstraint("role IN ('STUDENT', 'ADMIN')", name='ck_students_role')
    )

    op.create_index('idx_students_role', 'students', ['role'])


def downgrade():
    op.drop_index('idx_students_role', table_name='students')
    op.drop_table('students')
