import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from tradeshare.core.entities.trade import Deal, HistoryOrder
from tradeshare.core.interfaces.datasource import IDataSource, IHistoryConnection

logger = logging.getLogger(__name__)


def _utc(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _str_id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class MetaApiConnection(IHistoryConnection):
    """
    Wraps a MetaApi RPC connection and maps its raw dicts to domain entities.
    """

    def __init__(self, connection: Any):
        self.connection = connection

    async def list_history_orders(
        self,
        start_time: datetime,
        end_time: datetime,
        offset: int = 0,
        limit: int = 20
    ) -> List[HistoryOrder]:
        response = await self.connection.get_history_orders_by_time_range(start_time, end_time, offset, limit)
        return self._map_orders(response.get("historyOrders", []))

    async def list_deals_for_position(self, position_id: str) -> List[Deal]:
        response = await self.connection.get_deals_by_position(position_id)
        return self._map_deals(response.get("deals", []))

    async def get_positions(self) -> List[dict]:
        return await self.connection.get_positions()

    async def close(self) -> None:
        await self.connection.close()

    def _map_orders(self, raw_orders: List[dict]) -> List[HistoryOrder]:
        orders = []
        for raw in raw_orders:
            try:
                orders.append(HistoryOrder(
                    id=_str_id(raw.get("id")),
                    positionId=_str_id(raw.get("positionId")),
                    time=_utc(raw.get("time")),
                    doneTime=_utc(raw.get("doneTime")),
                    state=raw.get("state"),
                    symbol=raw.get("symbol"),
                    type=raw.get("type")
                ))
            except Exception as map_err:
                logger.warning(f"Skipping malformed history order: {map_err}")
                continue
        return orders

    def _map_deals(self, raw_deals: List[dict]) -> List[Deal]:
        deals = []
        for raw in raw_deals:
            try:
                deals.append(Deal(
                    id=_str_id(raw.get("id")),
                    positionId=_str_id(raw.get("positionId")),
                    entryType=raw.get("entryType"),
                    type=raw.get("type"),
                    profit=float(raw.get("profit", 0)),
                    symbol=raw.get("symbol"),
                    volume=float(raw.get("volume", 0)),
                    time=_utc(raw.get("time"))
                ))
            except Exception as map_err:
                logger.warning(f"Skipping malformed deal: {map_err}")
                continue
        return deals


class MetaApiGateway(IDataSource):
    """
    Implementation of IDataSource for the MetaApi cloud service.
    Uses the official async Python SDK (metaapi-cloud-sdk).
    """

    def __init__(self, token: str):
        """
        :param token: MetaApi API access token.
        """
        from metaapi_cloud_sdk import MetaApi, MetaStats

        self.api = MetaApi(token)
        self.meta_stats = MetaStats(token)
        logger.info("MetaApiGateway initialized.")

    async def open_connection(self, account_id: str) -> IHistoryConnection:
        account = await self.api.metatrader_account_api.get_account(account_id)
        connection = account.get_rpc_connection()
        await connection.connect()
        try:
            await connection.wait_synchronized()
        except Exception:
            await connection.close()
            raise
        return MetaApiConnection(connection)

    async def get_metrics(self, account_id: str) -> dict:
        return await self.meta_stats.get_metrics(account_id)
