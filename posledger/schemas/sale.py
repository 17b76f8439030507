from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from posledger.models import PaymentMethod, ProductCategory
from posledger.schemas.common import RecordRead


class SaleItemInput(BaseModel):
    """Schema for a single line in the sale request."""
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0, description="Price charged per unit at the time of sale.")


class SaleCreate(BaseModel):
    """Schema for the full checkout request body."""
    items: List[SaleItemInput] = Field(..., min_length=1)
    discount_amount: float = Field(0, ge=0, description="Flat discount.")
    discount_percent: float = Field(0, ge=0, le=100, description="Percentage discount on the subtotal.")
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_received: float = Field(..., ge=0)
    notes: Optional[str] = None


class SaleUpdate(BaseModel):
    # Sales are immutable apart from their notes
    notes: Optional[str] = None


class SaleRead(RecordRead):
    subtotal: float
    discount_amount: float
    discount_percent: float
    total: float
    payment_method: PaymentMethod
    amount_received: float
    change_amount: float
    notes: Optional[str] = None


class SaleItemDetail(BaseModel):
    """A sale line joined with its product."""
    id: int
    sale_id: int
    product_id: int
    quantity: int
    unit_price: float
    subtotal: float
    product_name: str
    product_category: ProductCategory
    product_selling_price: float


class SaleWithItems(SaleRead):
    items: List[SaleItemDetail]


class DailySalesSummary(BaseModel):
    date: date
    total_sales: float
    transaction_count: int
    average_transaction: float
    total_discount: float
