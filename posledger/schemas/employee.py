from typing import Optional

from pydantic import BaseModel, Field, field_validator

from posledger.models import EmployeeRole, WageType
from posledger.schemas.common import RecordRead, reject_null


class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    role: EmployeeRole = EmployeeRole.STAFF
    wage_type: WageType = WageType.DAILY
    wage_amount: float = Field(..., ge=0, description="Pay per hour, day or month depending on wage_type.")
    pin_hash: Optional[str] = None


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[EmployeeRole] = None
    wage_type: Optional[WageType] = None
    wage_amount: Optional[float] = Field(None, ge=0)
    pin_hash: Optional[str] = None

    @field_validator("name", "role", "wage_type", "wage_amount")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class EmployeeRead(RecordRead):
    name: str
    role: EmployeeRole
    wage_type: WageType
    wage_amount: float
