from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from tradeshare.core.entities.trade import Deal, HistoryOrder


class IHistoryConnection(ABC):
    """
    Read-only view of one account's trading terminal connection.
    """

    @abstractmethod
    async def list_history_orders(
        self,
        start_time: datetime,
        end_time: datetime,
        offset: int = 0,
        limit: int = 20
    ) -> List[HistoryOrder]:
        """
        Returns history orders with start_time <= time < end_time.
        """
        pass

    @abstractmethod
    async def list_deals_for_position(self, position_id: str) -> List[Deal]:
        pass

    @abstractmethod
    async def get_positions(self) -> List[dict]:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class IDataSource(ABC):
    @abstractmethod
    async def open_connection(self, account_id: str) -> IHistoryConnection:
        """
        Connects to the account and waits until its terminal state is synchronized.
        """
        pass

    @abstractmethod
    async def get_metrics(self, account_id: str) -> dict:
        pass
