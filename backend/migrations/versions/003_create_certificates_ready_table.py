"""Create certificates_ready table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


def upgrade():
    # Presence of a row means the certificate can be collected
    op.create_table(
        'certificates_ready',
        sa.Column('matric', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('matric'),
        sa.ForeignKeyConstraint(['matric'], ['students.matric'], ondelete='CASCADE')
    )


def downgrade():
    op.drop_table('certificates_ready')
