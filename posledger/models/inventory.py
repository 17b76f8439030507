import enum
from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.models.base import Base, LedgerRecord, enum_column


class TransactionType(str, enum.Enum):
    STOCK_IN = "stock_in"
    STOCK_OUT = "stock_out"
    ADJUSTMENT = "adjustment"  # Signed quantity
    SALE = "sale"


class InventoryTransaction(LedgerRecord, Base):
    """
    One row of the stock ledger. Every change applied through
    InventoryTransactionRepository.create lands here with the quantity moved.
    """
    __tablename__ = "inventory_transactions"
    __table_args__ = (
        Index("idx_inventory_transactions_ingredient", "ingredient_id"),
        Index("idx_inventory_transactions_type", "transaction_type"),
        Index("idx_inventory_transactions_date", "created_at"),
        Index("idx_inventory_transactions_reference", "reference_id"),
    )

    ingredient_id: Mapped[int] = mapped_column(ForeignKey("ingredients.id"), nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(enum_column(TransactionType), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit_cost: Mapped[Optional[float]] = mapped_column(Float)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    reference_id: Mapped[Optional[int]] = mapped_column(Integer)  # Originating sale id

    @property
    def stock_change(self) -> float:
        return stock_change_for(self.transaction_type, self.quantity)


def stock_change_for(transaction_type: TransactionType, quantity: float) -> float:
    """Signed delta a transaction applies to quantity_in_stock."""
    if transaction_type in (TransactionType.STOCK_OUT, TransactionType.SALE):
        return -quantity
    return quantity
