import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.core.db import Database
from posledger.models import (
    Ingredient,
    PaymentMethod,
    Product,
    RecipeItem,
    Sale,
    SaleItem,
    TransactionType,
)
from posledger.models.base import local_now
from posledger.repositories.base import BaseRepository, patch_row, set_active
from posledger.repositories.inventory_transaction import InventoryTransactionRepository
from posledger.schemas.inventory import InventoryTransactionCreate
from posledger.schemas.sale import (
    DailySalesSummary,
    SaleCreate,
    SaleItemDetail,
    SaleRead,
    SaleUpdate,
    SaleWithItems,
)

log = logging.getLogger("posledger.sales")


class SaleRepository(BaseRepository[Sale]):
    """
    Sales and their line items.

    A sale, its items and the ingredient deductions it causes are written in
    one unit of work. Voiding is the only state change after that: it puts the
    deducted stock back and hides the sale and its items.
    """
    model = Sale

    def __init__(self, db: Database, inventory: InventoryTransactionRepository):
        super().__init__(db)
        self.inventory = inventory

    async def create(self, data: SaleCreate, session: Optional[AsyncSession] = None) -> Sale:
        subtotal = sum(item.unit_price * item.quantity for item in data.items)
        total_discount = data.discount_amount + subtotal * (data.discount_percent / 100)
        total = subtotal - total_discount
        # Negative change is the register's problem to reject, not ours
        change_amount = data.amount_received - total

        async with self.db.in_transaction(session) as s:
            sale = Sale(
                subtotal=subtotal,
                discount_amount=data.discount_amount,
                discount_percent=data.discount_percent,
                total=total,
                payment_method=data.payment_method,
                amount_received=data.amount_received,
                change_amount=change_amount,
                notes=data.notes,
            )
            s.add(sale)
            await s.flush()

            for item in data.items:
                s.add(
                    SaleItem(
                        sale_id=sale.id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        subtotal=item.unit_price * item.quantity,
                    )
                )
                await s.flush()
                await self._deduct_ingredients(s, sale.id, item.product_id, item.quantity)

            log.info(f"Sale {sale.id} recorded: {len(data.items)} items, total {total:.2f} via {data.payment_method.value}")
            return await self.get_by_id(sale.id, session=s)

    async def update(
        self, record_id: int, data: SaleUpdate, session: Optional[AsyncSession] = None
    ) -> Optional[Sale]:
        async with self.db.in_transaction(session) as s:
            existing = await self.get_by_id(record_id, session=s)
            if existing is None:
                return None
            if "notes" not in data.model_fields_set:
                return existing
            await patch_row(s, Sale, record_id, {"notes": data.notes})
            return await self.get_by_id(record_id, session=s)

    async def get_items(self, record_id: int, session: Optional[AsyncSession] = None) -> List[SaleItem]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                select(SaleItem)
                .where(SaleItem.sale_id == record_id, SaleItem.is_active.is_(True))
                .order_by(SaleItem.id)
            )
            return list(result)

    async def get_with_items(self, record_id: int, session: Optional[AsyncSession] = None) -> Optional[SaleWithItems]:
        async with self.db.in_transaction(session) as s:
            sale = await self.get_by_id(record_id, session=s)
            if sale is None:
                return None

            rows = await s.execute(
                select(SaleItem, Product.name, Product.category, Product.selling_price)
                .join(Product, Product.id == SaleItem.product_id)
                .where(SaleItem.sale_id == record_id, SaleItem.is_active.is_(True))
                .order_by(SaleItem.id)
            )
            items = [
                SaleItemDetail(
                    id=item.id,
                    sale_id=item.sale_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                    product_name=name,
                    product_category=category,
                    product_selling_price=selling_price,
                )
                for item, name, category, selling_price in rows.all()
            ]
            return SaleWithItems(**SaleRead.model_validate(sale).model_dump(), items=items)

    async def get_by_date_range(self, start: date, end: date, session: Optional[AsyncSession] = None) -> List[Sale]:
        """Both ends inclusive, by local calendar day."""
        day = func.date(Sale.created_at)
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._newest_first(self._active().where(day >= start.isoformat(), day <= end.isoformat()))
            )
            return list(result)

    async def get_by_payment_method(
        self, method: PaymentMethod, session: Optional[AsyncSession] = None
    ) -> List[Sale]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._newest_first(self._active().where(Sale.payment_method == method)))
            return list(result)

    async def get_today(self, session: Optional[AsyncSession] = None) -> List[Sale]:
        today = date.today()
        return await self.get_by_date_range(today, today, session=session)

    async def get_daily_summary(self, day: date, session: Optional[AsyncSession] = None) -> DailySalesSummary:
        async with self.db.in_transaction(session) as s:
            row = (
                await s.execute(
                    select(
                        func.coalesce(func.sum(Sale.total), 0),
                        func.count(Sale.id),
                        func.coalesce(func.sum(Sale.subtotal - Sale.total), 0),
                    ).where(func.date(Sale.created_at) == day.isoformat(), Sale.is_active.is_(True))
                )
            ).one()

        total_sales, transaction_count, total_discount = row
        return DailySalesSummary(
            date=day,
            total_sales=total_sales,
            transaction_count=transaction_count,
            average_transaction=total_sales / transaction_count if transaction_count > 0 else 0.0,
            total_discount=total_discount,
        )

    async def void_sale(self, record_id: int, session: Optional[AsyncSession] = None) -> bool:
        """
        Puts back every ingredient quantity the sale deducted, then soft deletes
        the sale and its items. False when the sale is missing or already void.
        """
        async with self.db.in_transaction(session) as s:
            sale = await self.get_by_id(record_id, session=s)
            if sale is None:
                return False

            deductions = await self.inventory.get_by_reference(record_id, TransactionType.SALE, session=s)
            for deduction in reversed(deductions):
                await self.inventory.create(
                    InventoryTransactionCreate(
                        ingredient_id=deduction.ingredient_id,
                        transaction_type=TransactionType.ADJUSTMENT,
                        quantity=deduction.quantity,
                        unit_cost=deduction.unit_cost,
                        notes=f"Void of sale #{record_id}",
                        reference_id=record_id,
                    ),
                    session=s,
                )

            await set_active(s, Sale, record_id, False)
            await s.execute(
                update(SaleItem)
                .where(SaleItem.sale_id == record_id, SaleItem.is_active.is_(True))
                .values(is_active=False, updated_at=local_now())
                .execution_options(synchronize_session=False)
            )
            log.info(f"Sale {record_id} voided; {len(deductions)} stock deductions reversed")
            return True

    async def delete(self, record_id: int, session: Optional[AsyncSession] = None) -> bool:
        return await self.void_sale(record_id, session=session)

    async def restore(self, record_id: int, session: Optional[AsyncSession] = None) -> bool:
        # active -> voided is one-way
        log.warning(f"Refusing to restore sale {record_id}: voided sales stay voided")
        return False

    async def _deduct_ingredients(self, session: AsyncSession, sale_id: int, product_id: int, quantity: int) -> None:
        product = await session.get(Product, product_id)
        if product is None or not product.is_inventory_tracked or product.recipe_id is None:
            return

        rows = await session.execute(
            select(RecipeItem.ingredient_id, RecipeItem.quantity, Ingredient.cost_per_unit)
            .outerjoin(Ingredient, Ingredient.id == RecipeItem.ingredient_id)
            .where(RecipeItem.recipe_id == product.recipe_id, RecipeItem.is_active.is_(True))
            .order_by(RecipeItem.id)
        )
        for ingredient_id, per_unit, cost_per_unit in rows.all():
            await self.inventory.create(
                InventoryTransactionCreate(
                    ingredient_id=ingredient_id,
                    transaction_type=TransactionType.SALE,
                    quantity=per_unit * quantity,
                    unit_cost=cost_per_unit,
                    notes=f"Sale #{sale_id}",
                    reference_id=sale_id,
                ),
                session=session,
            )
