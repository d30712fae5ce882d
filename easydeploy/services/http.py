#!/usr/bin/env python3
"""
Shared aiohttp helpers for the provider integrations
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from ..common.errors import UpstreamServiceError


@asynccontextmanager
async def client_session(
    session: Optional[aiohttp.ClientSession] = None,
    timeout_sec: int = 30,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Reuse ``session`` when given, otherwise open one for the block"""
    if session is not None:
        yield session
        return
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout_sec)) as owned:
        yield owned


async def read_json(response: aiohttp.ClientResponse, service: str) -> Any:
    """Decode a JSON body; HTML error pages and junk become UpstreamServiceError"""
    try:
        return await response.json(content_type=None)
    except ValueError as e:
        raise UpstreamServiceError(
            f"{service} returned a non-JSON body (HTTP {response.status})", details=await response.text()
        ) from e


async def get_json(
    session: aiohttp.ClientSession,
    url: str,
    service: str,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    try:
        async with session.get(url, params=params) as response:
            if response.status != 200:
                raise UpstreamServiceError(
                    f"{service} returned HTTP {response.status}", details=await response.text()
                )
            return await read_json(response, service)
    except asyncio.TimeoutError as e:
        raise UpstreamServiceError(f"{service} request timed out") from e
    except aiohttp.ClientError as e:
        raise UpstreamServiceError(f"{service} request failed: {e}") from e
