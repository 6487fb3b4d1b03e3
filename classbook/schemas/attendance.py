from datetime import date as Date
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..constants import FIRST_PERIOD, LAST_PERIOD


class StudentMark(BaseModel):
    name: str = Field(min_length=1)
    present: bool


class SaveSlotRequest(BaseModel):
    date: Date
    period: int = Field(ge=FIRST_PERIOD, le=LAST_PERIOD)
    list: list[StudentMark]


class MatrixRequest(BaseModel):
    # Anything other than a list is answered with an empty matrix, not rejected
    weekDates: Optional[Any] = None


class MatrixRow(BaseModel):
    name: str
    slots: dict[str, bool]
