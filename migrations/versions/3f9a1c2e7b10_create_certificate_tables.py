"""Create user, log, exam result, certificate and PDF document tables"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9a1c2e7b10'
down_revision = None
branch_labels = None
depends_on = None


def _big_int():
    return sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', _big_int(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='student'),
        sa.Column('is_approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('level', sa.String(length=20), nullable=False),
        sa.Column('event', sa.String(length=50), nullable=False),
        sa.Column('logger_name', sa.String(length=120), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('trace', sa.Text(), nullable=True),
        sa.Column('path', sa.String(length=255), nullable=True),
        sa.Column('request_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_log_event', 'log', ['event'])

    op.create_table(
        'exam_results',
        sa.Column('id', _big_int(), autoincrement=True, nullable=False),
        sa.Column('user_id', _big_int(), nullable=False),
        sa.Column('exam_name', sa.String(length=255), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('scores', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_exam_results_user_year_created',
        'exam_results',
        ['user_id', 'year', 'created_at'],
    )

    op.create_table(
        'certificates',
        sa.Column('id', _big_int(), autoincrement=True, nullable=False),
        sa.Column('certificate_id', sa.String(length=32), nullable=False),
        sa.Column('user_id', _big_int(), nullable=False),
        sa.Column('exam_result_id', _big_int(), nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['exam_result_id'], ['exam_results.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_certificates_certificate_id', 'certificates', ['certificate_id'], unique=True)
    op.create_index('ix_certificates_user_id', 'certificates', ['user_id'])
    op.create_index('ix_certificates_issued_at', 'certificates', ['issued_at'])

    op.create_table(
        'pdf_documents',
        sa.Column('id', _big_int(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('encrypted_reference', sa.String(length=512), nullable=True),
        sa.Column('uploaded_by', _big_int(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['uploaded_by'], ['user.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('filename'),
    )


def downgrade():
    op.drop_table('pdf_documents')
    op.drop_index('ix_certificates_issued_at', table_name='certificates')
    op.drop_index('ix_certificates_user_id', table_name='certificates')
    op.drop_index('ix_certificates_certificate_id', table_name='certificates')
    op.drop_table('certificates')
    op.drop_index('ix_exam_results_user_year_created', table_name='exam_results')
    op.drop_table('exam_results')
    op.drop_index('ix_log_event', table_name='log')
    op.drop_table('log')
    op.drop_table('user')
