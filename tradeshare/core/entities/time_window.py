from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, model_validator


class HistoryRange(IntEnum):
    TODAY = 1
    WEEK = 2
    MONTH = 3


class TimeWindow(BaseModel):
    """
    Half-open interval [start, end) handed to the history orders query.
    """
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self):
        if self.start > self.end:
            raise ValueError("TimeWindow start must not be after end")
        return self
