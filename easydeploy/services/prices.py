#!/usr/bin/env python3
"""
Price lookup: Pyth Hermes when configured, CoinGecko ETH/USD otherwise
"""
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..common.errors import UpstreamServiceError
from .http import client_session, get_json

logger = logging.getLogger(__name__)


class PriceService:
    def __init__(
        self,
        hermes_url: str = "",
        product_id: str = "",
        coingecko_url: str = "https://api.coingecko.com/api/v3",
        timeout_sec: int = 30,
    ):
        self.hermes_url = hermes_url.rstrip("/")
        self.product_id = product_id
        self.coingecko_url = coingecko_url.rstrip("/")
        self.timeout_sec = timeout_sec

    async def latest(
        self,
        product_id: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> Dict[str, Any]:
        pid = product_id or self.product_id
        async with client_session(session, self.timeout_sec) as http:
            if self.hermes_url and pid:
                raw = await get_json(http, f"{self.hermes_url}/v2/price/latest/{pid}", "Pyth Hermes")
                return {"source": "pyth_hermes", "raw": raw}

            data = await get_json(
                http,
                f"{self.coingecko_url}/simple/price",
                "CoinGecko",
                params={"ids": "ethereum", "vs_currencies": "usd"},
            )

        price = data.get("ethereum", {}).get("usd")
        if price is None:
            raise UpstreamServiceError("CoinGecko response has no ethereum/usd price", details=data)
        return {"source": "coingecko", "price": price}
