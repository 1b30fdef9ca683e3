"""Keyword search over the stock reference store."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..core.interfaces import ReferenceStoreInterface

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 2


def search_stocks(store: ReferenceStoreInterface, keyword: Optional[str], limit: int = 50) -> List[Dict]:
    """Case-insensitive substring match on symbol or company name.

    Exact symbol matches come first, then symbols starting with the keyword,
    then the rest alphabetically, so the limit never drops the best hits.
    """
    if not keyword or len(keyword.strip()) < MIN_KEYWORD_LENGTH:
        logger.debug("Search keyword too short, returning empty results")
        return []

    q = keyword.strip().lower()
    wanted = q.upper()
    rows = [
        {"symbol": r.symbol, "name": r.name}
        for r in store.list_all()
        if q in r.symbol.lower() or q in r.name.lower()
    ]
    rows.sort(key=lambda row: (row["symbol"] != wanted, not row["symbol"].startswith(wanted), row["symbol"]))
    logger.info("Search for %r matched %d stocks", keyword, len(rows))
    return rows[:limit]
