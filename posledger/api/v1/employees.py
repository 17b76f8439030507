from fastapi import APIRouter, Depends, HTTPException, status

from posledger.api.deps import found, get_repos
from posledger.repositories import Repositories
from posledger.schemas.employee import EmployeeCreate, EmployeeRead, EmployeeUpdate
from posledger.schemas.response import SuccessResponse

router = APIRouter()


def _read(employee) -> dict:
    return EmployeeRead.model_validate(employee).model_dump()


@router.get("/", response_model=SuccessResponse)
async def list_employees(repos: Repositories = Depends(get_repos)):
    employees = await repos.employees.get_active_employees()
    return SuccessResponse(data=[_read(e) for e in employees])


@router.get("/labor-cost", response_model=SuccessResponse)
async def daily_labor_cost(repos: Repositories = Depends(get_repos)):
    return SuccessResponse(data={"daily_labor_cost": await repos.employees.get_daily_labor_cost()})


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_employee(payload: EmployeeCreate, repos: Repositories = Depends(get_repos)):
    employee = await repos.employees.create(payload)
    return SuccessResponse(data=_read(employee), message=f"Employee '{employee.name}' added.")


@router.patch("/{employee_id}", response_model=SuccessResponse)
async def update_employee(employee_id: int, payload: EmployeeUpdate, repos: Repositories = Depends(get_repos)):
    employee = found(await repos.employees.update(employee_id, payload), "Employee")
    return SuccessResponse(data=_read(employee))


@router.delete("/{employee_id}", response_model=SuccessResponse)
async def delete_employee(employee_id: int, repos: Repositories = Depends(get_repos)):
    if not await repos.employees.delete(employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return SuccessResponse(message=f"Employee {employee_id} removed.")
