from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RecordRead(BaseModel):
    """Fields every stored row exposes."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime
    is_active: bool


def reject_null(value):
    """Patch fields may be left out, but not sent as null for a NOT NULL column."""
    if value is None:
        raise ValueError("must not be null; omit the field to leave it unchanged")
    return value
