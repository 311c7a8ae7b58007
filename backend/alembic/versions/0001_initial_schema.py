"""initial billing schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("alpha_code", sa.String(length=10), nullable=False, unique=True),
        sa.Column("numeric_code", sa.String(length=10), nullable=False, unique=True),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("general_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("ac_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("fixed_price", sa.Numeric(10, 2), nullable=True),
    )
    op.create_index("ix_menu_items_id", "menu_items", ["id"])

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bill_no", sa.Integer(), nullable=False),
        sa.Column("business_date", sa.Date(), nullable=False),
        sa.Column("table_no", sa.String(length=20), nullable=False),
        sa.Column("party_no", sa.String(length=20), nullable=True),
        sa.Column("waiter_no", sa.String(length=20), nullable=True),
        sa.Column("area", sa.String(length=10), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("business_date", "bill_no", name="uq_bills_date_bill_no"),
    )
    op.create_index("ix_bills_id", "bills", ["id"])
    op.create_index("idx_bills_business_date", "bills", ["business_date"])
    op.create_index("idx_bills_table_no", "bills", ["table_no"])

    op.create_table(
        "bill_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id"), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("menu_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_bill_items_quantity_positive"),
    )
    op.create_index("ix_bill_items_id", "bill_items", ["id"])
    op.create_index("ix_bill_items_bill_id", "bill_items", ["bill_id"])
    op.create_index("ix_bill_items_item_id", "bill_items", ["item_id"])

    op.create_table(
        "bill_sequence",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("last_reset_date", sa.Date(), nullable=False),
        sa.Column("last_bill_no", sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("bill_sequence")
    op.drop_index("ix_bill_items_item_id", table_name="bill_items")
    op.drop_index("ix_bill_items_bill_id", table_name="bill_items")
    op.drop_index("ix_bill_items_id", table_name="bill_items")
    op.drop_table("bill_items")
    op.drop_index("idx_bills_table_no", table_name="bills")
    op.drop_index("idx_bills_business_date", table_name="bills")
    op.drop_index("ix_bills_id", table_name="bills")
    op.drop_table("bills")
    op.drop_index("ix_menu_items_id", table_name="menu_items")
    op.drop_table("menu_items")
