"""Unique invoice numbers

Revision ID: a003
Revises: a002
Create Date: 2025-02-20

"""
from alembic import op

# revision identifiers, used by Alembic.
revision = 'a003'
down_revision = 'a002'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Reject a second invoice with the same number at the store."""
    with op.batch_alter_table('invoices') as batch_op:
        batch_op.create_unique_constraint('uq_invoices_invoice_number', ['invoice_number'])


def downgrade() -> None:
    """Allow repeated invoice numbers again."""
    with op.batch_alter_table('invoices') as batch_op:
        batch_op.drop_constraint('uq_invoices_invoice_number', type_='unique')
