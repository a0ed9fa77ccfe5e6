import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from tradeshare.core.entities.time_window import HistoryRange
from tradeshare.core.entities.trade import Trade
from tradeshare.core.exceptions import TradeShareError, UpstreamError
from tradeshare.core.interfaces.datasource import IDataSource
from tradeshare.core.use_cases.error_classifier import classify
from tradeshare.core.use_cases.time_range_resolver import BROKER_UTC_OFFSET_HOURS, resolve
from tradeshare.core.use_cases.trade_aggregator import TradeAggregator
from tradeshare.core.use_cases.trade_sorter import sort_trades

logger = logging.getLogger(__name__)


def _upstream_error(account_id: str, operation: str, error: Exception) -> UpstreamError:
    classified = classify(error)
    logger.error(
        f"{operation} failed for account {account_id}: "
        f"{classified.category.value} ({classified.httpStatus}) {classified.message}"
    )
    return UpstreamError(classified)


class HistoricalTradesService:
    def __init__(
        self,
        datasource: IDataSource,
        aggregator: Optional[TradeAggregator] = None,
        offset_hours: int = BROKER_UTC_OFFSET_HOURS
    ):
        self.datasource = datasource
        self.aggregator = aggregator or TradeAggregator()
        self.offset_hours = offset_hours

    async def get_historical_trades(
        self,
        account_id: str,
        history_range: Union[HistoryRange, int, str],
        offset: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[Trade]:
        """
        Closed trades of one account inside the selected range, newest first.

        The range is validated before any upstream call. Upstream failures are
        classified and raised as UpstreamError; there is no partial result.
        """
        now = now or datetime.now(timezone.utc)
        window = resolve(history_range, now, self.offset_hours)

        try:
            connection = await self.datasource.open_connection(account_id)
            try:
                trades = await self.aggregator.aggregate(connection, window, offset, now)
            finally:
                await connection.close()
        except TradeShareError:
            raise
        except Exception as e:
            raise _upstream_error(account_id, "Historical trades", e) from e

        return sort_trades(trades)


class AccountService:
    def __init__(self, datasource: IDataSource):
        self.datasource = datasource

    async def get_open_positions(self, account_id: str) -> List[dict]:
        try:
            connection = await self.datasource.open_connection(account_id)
            try:
                return await connection.get_positions()
            finally:
                await connection.close()
        except TradeShareError:
            raise
        except Exception as e:
            raise _upstream_error(account_id, "Open positions", e) from e

    async def get_equity_metrics(self, account_id: str) -> dict:
        try:
            return await self.datasource.get_metrics(account_id)
        except TradeShareError:
            raise
        except Exception as e:
            raise _upstream_error(account_id, "Equity metrics", e) from e
