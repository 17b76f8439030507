import enum
from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.models.base import Base, LedgerRecord, enum_column


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    GCASH = "gcash"
    MAYA = "maya"
    CARD = "card"
    OTHER = "other"


class Sale(LedgerRecord, Base):
    """A completed sale while is_active; voiding is the only transition."""
    __tablename__ = "sales"
    __table_args__ = (
        Index("idx_sales_date", "created_at"),
        Index("idx_sales_payment_method", "payment_method"),
        Index("idx_sales_active", "is_active"),
    )

    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    discount_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)  # Flat part of the discount
    discount_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        enum_column(PaymentMethod), nullable=False, default=PaymentMethod.CASH
    )
    amount_received: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    change_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    @property
    def total_discount(self) -> float:
        """Flat discount plus the percentage part."""
        return self.subtotal - self.total


class SaleItem(LedgerRecord, Base):
    __tablename__ = "sale_items"
    __table_args__ = (
        Index("idx_sale_items_sale", "sale_id"),
        Index("idx_sale_items_product", "product_id"),
    )

    sale_id: Mapped[int] = mapped_column(ForeignKey("sales.id"), nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0)
