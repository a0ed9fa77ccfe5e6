import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

# --- Imports ---
from tradeshare.core.entities.time_window import HistoryRange
from tradeshare.core.exceptions import MissingParameterError, TradeShareError
from tradeshare.core.interfaces.datasource import IDataSource
from tradeshare.core.services import AccountService, HistoricalTradesService
from tradeshare.core.use_cases.time_range_resolver import parse_history_range
from tradeshare.core.use_cases.trade_aggregator import TradeAggregator
from tradeshare.infrastructure.config import Settings, get_settings

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TradeShare")

app = FastAPI(title="TradeShare API", version="1.0.0", description="Trading account history, positions & equity API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TradeShareError)
async def tradeshare_error_handler(request: Request, exc: TradeShareError):
    logger.warning(f"{request.url.path} -> {exc.status_code} {exc.category.value}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "category": exc.category.value},
    )


# --- Dependency Injection ---

@lru_cache
def _gateway(token: str) -> IDataSource:
    # One SDK client per token; connections themselves are opened per request.
    from tradeshare.infrastructure.gateways.metaapi_gateway import MetaApiGateway
    return MetaApiGateway(token)


def get_datasource(settings: Settings = Depends(get_settings)) -> IDataSource:
    if not settings.metaapi_token:
        raise TradeShareError("MetaApi token is not configured", status_code=503)
    return _gateway(settings.metaapi_token)


def get_trades_service(
    datasource: IDataSource = Depends(get_datasource),
    settings: Settings = Depends(get_settings)
) -> HistoricalTradesService:
    aggregator = TradeAggregator(page_size=settings.history_page_size, concurrency=settings.deals_concurrency)
    return HistoricalTradesService(datasource, aggregator, settings.broker_utc_offset_hours)


def get_account_service(datasource: IDataSource = Depends(get_datasource)) -> AccountService:
    return AccountService(datasource)


# --- Request parameters ---
# Declared ahead of the service dependencies so bad requests fail with 400
# before any datasource is resolved.

class HistoryQuery(BaseModel):
    account_id: str
    history_range: HistoryRange
    offset: Optional[int] = None


def get_history_query(
    account_id: Optional[str] = Query(None, description="MetaApi account id"),
    history_range: Optional[str] = Query(None, description="1/today, 2/week or 3/month"),
    offset: Optional[int] = Query(None, ge=0, description="History orders page offset"),
) -> HistoryQuery:
    if not account_id or not history_range:
        raise MissingParameterError("account_id or history range parameter are required")
    return HistoryQuery(account_id=account_id, history_range=parse_history_range(history_range), offset=offset)


def get_account_id(account_id: Optional[str] = Query(None, description="MetaApi account id")) -> str:
    if not account_id:
        raise MissingParameterError("Please provide an account id")
    return account_id


# --- Endpoints ---

@app.get("/health")
async def health():
    return {"status": "healthy", "mode": "MetaApi cloud via Gateway"}


@app.get("/v1/historicaltrades")
async def get_historical_trades(
    query: HistoryQuery = Depends(get_history_query),
    service: HistoricalTradesService = Depends(get_trades_service)
):
    """
    Closed trades for the selected range, newest first.
    One page of history orders per call; pass a new offset for the next page.
    """
    trades = await service.get_historical_trades(query.account_id, query.history_range, query.offset)
    return {"trades": trades}


@app.get("/v1/positions")
async def get_open_positions(
    account_id: str = Depends(get_account_id),
    service: AccountService = Depends(get_account_service)
):
    positions = await service.get_open_positions(account_id)
    return {"positions": positions}


@app.get("/v1/equity_chart")
async def get_equity_chart(
    account_id: str = Depends(get_account_id),
    service: AccountService = Depends(get_account_service)
):
    metrics = await service.get_equity_metrics(account_id)
    return {"metrics": metrics}
