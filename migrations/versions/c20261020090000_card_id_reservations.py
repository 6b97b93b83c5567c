"""card id reservations

Revision ID: c20261020090000
Revises: c20261019120000
Create Date: 2026-10-20 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c20261020090000'
down_revision = 'c20261019120000'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if 'card_id_reservation' in inspector.get_table_names():
        return

    op.create_table(
        'card_id_reservation',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('card_id', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_card_id_reservation_card_id', 'card_id_reservation', ['card_id'], unique=True)

    # Cards issued before reservations existed keep their IDs claimed
    op.execute(
        "INSERT INTO card_id_reservation (card_id, created_at) "
        "SELECT card_id, created_at FROM card_record"
    )


def downgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if 'card_id_reservation' in inspector.get_table_names():
        op.drop_index('ix_card_id_reservation_card_id', table_name='card_id_reservation')
        op.drop_table('card_id_reservation')
