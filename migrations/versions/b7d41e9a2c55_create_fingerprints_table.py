"""Create fingerprints table"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7d41e9a2c55'
down_revision = '3f9a1c2e7b10'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'fingerprints',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), nullable=False),
        sa.Column('data_digest', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'data_digest', name='uq_fingerprints_user_data'),
    )
    op.create_index('ix_fingerprints_user_id', 'fingerprints', ['user_id'])


def downgrade():
    op.drop_index('ix_fingerprints_user_id', table_name='fingerprints')
    op.drop_table('fingerprints')
