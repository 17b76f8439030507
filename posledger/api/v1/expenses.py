from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from posledger.api.deps import found, get_repos
from posledger.models import ExpenseCategory
from posledger.repositories import Repositories
from posledger.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate
from posledger.schemas.response import SuccessResponse

router = APIRouter()


def _read(expense) -> dict:
    return ExpenseRead.model_validate(expense).model_dump()


@router.get("/", response_model=SuccessResponse)
async def list_expenses(
    day: Optional[date] = None,
    category: Optional[ExpenseCategory] = None,
    recurring: bool = False,
    repos: Repositories = Depends(get_repos),
):
    if recurring:
        expenses = await repos.expenses.get_recurring()
    elif day is not None:
        expenses = await repos.expenses.get_by_date(day)
    elif category is not None:
        expenses = await repos.expenses.get_by_category(category)
    else:
        expenses = await repos.expenses.get_all()
    return SuccessResponse(data=[_read(e) for e in expenses])


@router.get("/breakdown", response_model=SuccessResponse)
async def category_breakdown(day: Optional[date] = None, repos: Repositories = Depends(get_repos)):
    day = day or date.today()
    totals = await repos.expenses.get_category_breakdown(day)
    return SuccessResponse(
        data={"date": day, "total": await repos.expenses.get_daily_total(day), "categories": [t.model_dump() for t in totals]}
    )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_expense(payload: ExpenseCreate, repos: Repositories = Depends(get_repos)):
    expense = await repos.expenses.create(payload)
    return SuccessResponse(data=_read(expense), message=f"Expense '{expense.name}' recorded.")


@router.patch("/{expense_id}", response_model=SuccessResponse)
async def update_expense(expense_id: int, payload: ExpenseUpdate, repos: Repositories = Depends(get_repos)):
    expense = found(await repos.expenses.update(expense_id, payload), "Expense")
    return SuccessResponse(data=_read(expense))


@router.delete("/{expense_id}", response_model=SuccessResponse)
async def delete_expense(expense_id: int, repos: Repositories = Depends(get_repos)):
    if not await repos.expenses.delete(expense_id):
        raise HTTPException(status_code=404, detail="Expense not found")
    return SuccessResponse(message=f"Expense {expense_id} deleted.")
