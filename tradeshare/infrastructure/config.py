import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel

from tradeshare.core.use_cases.time_range_resolver import BROKER_UTC_OFFSET_HOURS
from tradeshare.core.use_cases.trade_aggregator import DEFAULT_CONCURRENCY, DEFAULT_LIMIT


class Settings(BaseModel):
    metaapi_token: Optional[str] = None
    history_page_size: int = DEFAULT_LIMIT
    deals_concurrency: int = DEFAULT_CONCURRENCY
    broker_utc_offset_hours: int = BROKER_UTC_OFFSET_HOURS

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            metaapi_token=os.getenv("METAAPI_TOKEN") or os.getenv("ACCOUNT_TOKEN"),
            history_page_size=int(os.getenv("HISTORY_PAGE_SIZE", DEFAULT_LIMIT)),
            deals_concurrency=int(os.getenv("DEALS_CONCURRENCY", DEFAULT_CONCURRENCY)),
            broker_utc_offset_hours=int(os.getenv("BROKER_UTC_OFFSET_HOURS", BROKER_UTC_OFFSET_HOURS)),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
