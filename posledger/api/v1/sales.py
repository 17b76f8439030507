import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from posledger.api.deps import found, get_repos
from posledger.models import PaymentMethod
from posledger.repositories import Repositories
from posledger.schemas.response import SuccessResponse
from posledger.schemas.sale import SaleCreate, SaleRead, SaleUpdate

router = APIRouter()
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_sale_endpoint(payload: SaleCreate, repos: Repositories = Depends(get_repos)):
    """
    Rings up a sale. The sale, its items and the ingredient deductions are
    stored together or not at all.
    """
    subtotal = sum(item.unit_price * item.quantity for item in payload.items)
    total = subtotal - payload.discount_amount - subtotal * payload.discount_percent / 100
    if payload.amount_received < total:
        raise HTTPException(status_code=400, detail=f"Amount received is less than the total of {total:.2f}")

    try:
        sale = await repos.sales.create(payload)
    except IntegrityError as e:
        log.error(f"Sale rejected, unknown product in {[i.product_id for i in payload.items]}: {e.orig}")
        raise HTTPException(status_code=400, detail="Sale references a product that does not exist.")

    data = await repos.sales.get_with_items(sale.id)
    return SuccessResponse(data=data.model_dump(), message=f"Sale {sale.id} recorded. Change: {sale.change_amount:.2f}")


@router.get("/", response_model=SuccessResponse)
async def list_sales(
    start: Optional[date] = None,
    end: Optional[date] = None,
    payment_method: Optional[PaymentMethod] = None,
    repos: Repositories = Depends(get_repos),
):
    """Today's sales unless a date range or payment method is given."""
    if payment_method is not None:
        sales = await repos.sales.get_by_payment_method(payment_method)
    elif start is not None or end is not None:
        sales = await repos.sales.get_by_date_range(start or end, end or start)
    else:
        sales = await repos.sales.get_today()
    return SuccessResponse(data=[SaleRead.model_validate(s).model_dump() for s in sales])


@router.get("/summary", response_model=SuccessResponse)
async def daily_summary(day: Optional[date] = None, repos: Repositories = Depends(get_repos)):
    summary = await repos.sales.get_daily_summary(day or date.today())
    return SuccessResponse(data=summary.model_dump())


@router.get("/{sale_id}", response_model=SuccessResponse)
async def get_sale(sale_id: int, repos: Repositories = Depends(get_repos)):
    sale = found(await repos.sales.get_with_items(sale_id), "Sale")
    return SuccessResponse(data=sale.model_dump())


@router.patch("/{sale_id}", response_model=SuccessResponse)
async def update_sale_notes(sale_id: int, payload: SaleUpdate, repos: Repositories = Depends(get_repos)):
    sale = found(await repos.sales.update(sale_id, payload), "Sale")
    return SuccessResponse(data=SaleRead.model_validate(sale).model_dump())


@router.post("/{sale_id}/void", response_model=SuccessResponse)
async def void_sale_endpoint(sale_id: int, repos: Repositories = Depends(get_repos)):
    """Voids the sale and puts its ingredient deductions back into stock."""
    if not await repos.sales.void_sale(sale_id):
        raise HTTPException(status_code=404, detail="Sale not found or already voided")
    log.info(f"Sale {sale_id} voided via API.")
    return SuccessResponse(message=f"Sale {sale_id} voided. Inventory deductions reversed.")
