"""
Canonical relational database models for the billing backend.

These models represent the full relational schema and are used by Alembic
for migration generation. They are kept separate from storage adapters.
"""

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Index,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from hotel_billing.utils.time_utils import now_local_naive

Base = declarative_base()

# Money columns: two decimal places
Money = Numeric(10, 2)


class MenuItem(Base):
    """Menu catalog entry with one rate per seating area."""

    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    alpha_code = Column(String(10), unique=True, nullable=False)  # e.g. "IDL"
    numeric_code = Column(String(10), unique=True, nullable=False)  # e.g. "101"
    description = Column(String(255), nullable=False)
    general_rate = Column(Money, nullable=False)
    ac_rate = Column(Money, nullable=False)
    fixed_price = Column(Money, nullable=True)  # Defaults to general_rate on create

    bill_items = relationship("BillItem", back_populates="menu_item")

    def __repr__(self):
        return f"<MenuItem(id={self.id}, alpha_code={self.alpha_code}, numeric_code={self.numeric_code})>"


class Bill(Base):
    """Finalized bill header."""

    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True)
    bill_no = Column(Integer, nullable=False)  # Per-day sequential number
    business_date = Column(Date, nullable=False)
    table_no = Column(String(20), nullable=False)
    party_no = Column(String(20), nullable=True)
    waiter_no = Column(String(20), nullable=True)
    area = Column(String(10), nullable=False)  # GENERAL | AC
    total_amount = Column(Money, nullable=False)
    created_at = Column(DateTime, default=now_local_naive, nullable=False)

    __table_args__ = (
        UniqueConstraint("business_date", "bill_no", name="uq_bills_date_bill_no"),
        Index("idx_bills_business_date", "business_date"),
        Index("idx_bills_table_no", "table_no"),
    )

    items = relationship(
        "BillItem", back_populates="bill", cascade="all, delete-orphan", order_by="BillItem.id"
    )

    def __repr__(self):
        return f"<Bill(id={self.id}, bill_no={self.bill_no}, date={self.business_date}, total={self.total_amount})>"


class BillItem(Base):
    """Line of a finalized bill; rate is copied so later menu edits never change history."""

    __tablename__ = "bill_items"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    rate = Column(Money, nullable=False)
    amount = Column(Money, nullable=False)  # quantity * rate

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_bill_items_quantity_positive"),
    )

    bill = relationship("Bill", back_populates="items")
    menu_item = relationship("MenuItem", back_populates="bill_items")

    def __repr__(self):
        return f"<BillItem(id={self.id}, bill_id={self.bill_id}, item_id={self.item_id}, qty={self.quantity})>"


class BillSequence(Base):
    """Single-row counter backing per-day bill numbers."""

    __tablename__ = "bill_sequence"

    id = Column(Integer, primary_key=True)
    last_reset_date = Column(Date, nullable=False)
    last_bill_no = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<BillSequence(date={self.last_reset_date}, last_bill_no={self.last_bill_no})>"
