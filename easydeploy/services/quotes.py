#!/usr/bin/env python3
"""
1inch quote proxy and swap deep links
"""
from typing import Any, Dict, Optional

import aiohttp

from ..common.errors import ValidationError
from .http import client_session, get_json

DEFAULT_AMOUNT = "1000000000000000000"


def swap_link(to: str = "", chain: int = 137) -> str:
    """Deep link into the 1inch UI swapping ETH for ``to``"""
    return f"https://app.1inch.io/#/{chain}/swap/ETH/{to}"


class OneInchClient:
    def __init__(self, base_url: str = "https://api.1inch.io/v5.0", timeout_sec: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec

    async def quote(
        self,
        from_token: Optional[str],
        to_token: Optional[str],
        amount: str = DEFAULT_AMOUNT,
        chain_id: str = "1",
        session: Optional[aiohttp.ClientSession] = None,
    ) -> Dict[str, Any]:
        if not from_token or not to_token:
            raise ValidationError("fromTokenAddress and toTokenAddress required")

        params = {"fromTokenAddress": from_token, "toTokenAddress": to_token, "amount": amount}
        async with client_session(session, self.timeout_sec) as http:
            return await get_json(http, f"{self.base_url}/{chain_id}/quote", "1inch quote", params=params)
