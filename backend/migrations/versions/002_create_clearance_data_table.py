"""Create clearance_data table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'clearance_data',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('matric', sa.Text(), nullable=False),
        sa.Column('doc_type', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('file_ref', sa.Text(), nullable=True),
        sa.Column('original_filename', sa.Text(), nullable=True),
        sa.Column('mime_type', sa.Text(), nullable=True),
        sa.Column('notified_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['matric'], ['students.matric'], ondelete='RESTRICT'),
        # One record per (student, document type); concurrent first logins rely on this
        sa.UniqueConstraint('matric', 'doc_type', name='uq_clearance_data_matric_doc_type'),
        sa.CheckConstraint(
            "doc_type IN ('statement_of_result', 'school_fees_receipt', 'clearance_form', "
            "'certificate_payment_receipt', 'id_card')",
            name='ck_clearance_data_doc_type'
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'uploaded', 'verified', 'rejected', 'submitted_physically')",
            name='ck_clearance_data_status'
        ),
        sa.CheckConstraint(
            "status <> 'pending' OR file_ref IS NULL",
            name='ck_clearance_data_pending_no_file'
        )
    )

    # Admin review queues filter by type and status
    op.create_index('ix_clearance_data_doc_type_status', 'clearance_data', ['doc_type', 'status'])


def downgrade():
    op.drop_index('ix_clearance_data_doc_type_status', table_name='clearance_data')
    op.drop_table('clearance_data')
