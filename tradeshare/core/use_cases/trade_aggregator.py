import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from tradeshare.core.entities.time_window import TimeWindow
from tradeshare.core.entities.trade import Deal, Trade
from tradeshare.core.interfaces.datasource import IHistoryConnection
from tradeshare.core.use_cases.relative_time import format_time_ago

logger = logging.getLogger(__name__)

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 20
DEFAULT_CONCURRENCY = 5


class TradeAggregator:
    """
    Turns one page of history orders into the closed trades of their positions.

    Several orders can point at the same position (partial closes), so closing
    deals are deduplicated by deal id. Deal lookups run concurrently, bounded
    by `concurrency`; any upstream failure propagates and nothing partial is
    returned.
    """

    def __init__(self, page_size: int = DEFAULT_LIMIT, concurrency: int = DEFAULT_CONCURRENCY):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self.page_size = page_size
        self.concurrency = concurrency

    async def aggregate(
        self,
        connection: IHistoryConnection,
        window: TimeWindow,
        offset: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[Trade]:
        # 1. One page of history orders
        orders = await connection.list_history_orders(
            window.start,
            window.end,
            offset or DEFAULT_OFFSET,
            self.page_size
        )

        # 2. Distinct positions in arrival order
        position_ids: List[str] = []
        for order in orders:
            if not order.positionId:
                logger.debug(f"History order {order.id} has no position, skipping")
                continue
            if order.positionId not in position_ids:
                position_ids.append(order.positionId)

        # 3. Fetch deals per position (fan-out / fan-in)
        deals_by_position = await self._fetch_deals(connection, position_ids)

        # 4. Closing deals only, first occurrence of each deal id wins
        trades: List[Trade] = []
        seen_ids = set()
        for position_id in position_ids:
            for deal in deals_by_position[position_id]:
                if not deal.is_closing or deal.id in seen_ids:
                    continue
                seen_ids.add(deal.id)
                trades.append(self._to_trade(deal, now))

        logger.info(
            f"Aggregated {len(trades)} closed trades from {len(orders)} history orders "
            f"across {len(position_ids)} positions"
        )
        return trades

    async def _fetch_deals(self, connection: IHistoryConnection, position_ids: List[str]) -> Dict[str, List[Deal]]:
        semaphore = asyncio.Semaphore(self.concurrency)
        aborted = asyncio.Event()

        async def fetch(position_id: str) -> List[Deal]:
            async with semaphore:
                # A waiter woken by a failed fetch's release must not start a call
                if aborted.is_set():
                    return []
                try:
                    return await connection.list_deals_for_position(position_id)
                except BaseException:
                    aborted.set()
                    raise

        tasks = [asyncio.ensure_future(fetch(pid)) for pid in position_ids]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # No fetch may outlive the aggregation, the connection is closed next.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return dict(zip(position_ids, results))

    @staticmethod
    def _to_trade(deal: Deal, now: Optional[datetime]) -> Trade:
        return Trade(
            id=deal.id,
            type=deal.type,
            profit=deal.profit,
            symbol=deal.symbol,
            createdAt=format_time_ago(deal.time, now),
            volume=deal.volume,
            time=deal.time
        )
