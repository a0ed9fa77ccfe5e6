from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class DealEntryType(str, Enum):
    IN = "DEAL_ENTRY_IN"
    OUT = "DEAL_ENTRY_OUT"
    INOUT = "DEAL_ENTRY_INOUT"
    OUT_BY = "DEAL_ENTRY_OUT_BY"


class HistoryOrder(BaseModel):
    """
    A completed or canceled order kept in broker history.
    Always belongs to exactly one position.
    """
    id: str
    positionId: Optional[str] = None
    time: Optional[datetime] = None
    doneTime: Optional[datetime] = None
    state: Optional[str] = None
    symbol: Optional[str] = None
    type: Optional[str] = None


class Deal(BaseModel):
    """
    An executed leg against a position. Only OUT deals are realized closes.
    """
    id: str
    positionId: Optional[str] = None
    entryType: Optional[DealEntryType] = None
    type: Optional[str] = None
    profit: float = 0.0
    symbol: Optional[str] = None
    volume: float = 0.0
    time: datetime

    @property
    def is_closing(self) -> bool:
        return self.entryType == DealEntryType.OUT


class Trade(BaseModel):
    """
    Closed trade as returned to API callers.
    `id` is the originating deal id, `createdAt` a relative label computed
    when the response is assembled, `time` the absolute deal time.
    """
    id: str
    type: Optional[str] = None
    profit: float
    symbol: Optional[str] = None
    createdAt: str
    volume: float
    time: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "2215",
                "type": "DEAL_TYPE_SELL",
                "profit": 12.5,
                "symbol": "EURUSD",
                "createdAt": "3 days ago",
                "volume": 0.1,
                "time": "2024-03-07T14:21:05Z"
            }
        }
    )
