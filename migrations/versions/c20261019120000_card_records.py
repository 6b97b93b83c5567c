"""card records

Revision ID: c20261019120000
Revises:
Create Date: 2026-10-19 12:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c20261019120000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if 'card_record' in inspector.get_table_names():
        return

    op.create_table(
        'card_record',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('card_id', sa.String(length=32), nullable=False),
        sa.Column('wallet', sa.String(length=64), nullable=False, server_default=''),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('role', sa.String(length=100), nullable=False),
        sa.Column('alias', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('pdf_url', sa.String(length=500), nullable=False),
        sa.Column('tx_hash', sa.String(length=80), nullable=True),
        sa.Column('token_id', sa.BigInteger(), nullable=True),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=False),
        sa.Column('printed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('shipped', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('delivered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_card_record_card_id', 'card_record', ['card_id'], unique=True)


def downgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if 'card_record' in inspector.get_table_names():
        op.drop_index('ix_card_record_card_id', table_name='card_record')
        op.drop_table('card_record')
