from typing import List

from tradeshare.core.entities.trade import Trade


def sort_trades(trades: List[Trade]) -> List[Trade]:
    # sorted() stays stable with reverse=True, ties keep arrival order
    return sorted(trades, key=lambda t: t.time, reverse=True)
