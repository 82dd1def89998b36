"""Add carer color and shift category

Revision ID: a002
Revises: a001
Create Date: 2025-02-03

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'a002'
down_revision = 'a001'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Add carers.color and shifts.category, backfilling manual shifts."""
    op.add_column('carers', sa.Column('color', sa.String(20), nullable=True))
    op.add_column('shifts', sa.Column('category', sa.String(255), nullable=True))
    op.create_index('ix_shifts_category', 'shifts', ['category'])

    # Cost-bearing shifts without a line item were entered by hand for HIREUP
    op.execute(
        "UPDATE shifts SET category = 'HIREUP' "
        "WHERE line_item_id IS NULL AND cost > 0"
    )


def downgrade() -> None:
    """Remove carers.color and shifts.category."""
    op.drop_index('ix_shifts_category', table_name='shifts')
    op.drop_column('shifts', 'category')
    op.drop_column('carers', 'color')
