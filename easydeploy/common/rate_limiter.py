#!/usr/bin/env python3
"""
Rate limiting utilities for API endpoints
"""
import threading
import time
from typing import Dict, List

from fastapi import HTTPException, Request


class RateLimiter:
    def __init__(self, max_requests: int = 10, window_seconds: int = 300):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def is_allowed(self, identifier: str) -> bool:
        """Check if request is allowed under rate limit"""
        now = time.time()

        with self._lock:
            recent = [
                req_time for req_time in self.requests.get(identifier, [])
                if now - req_time < self.window_seconds
            ]

            if len(recent) >= self.max_requests:
                self.requests[identifier] = recent
                return False

            recent.append(now)
            self.requests[identifier] = recent
            return True

    def check(self, request: Request, operation: str) -> None:
        """Raise 429 when the client behind ``request`` is over its budget"""
        if not self.is_allowed(get_client_identifier(request)):
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded for {operation}",
                headers={"Retry-After": str(self.window_seconds)}
            )


def get_client_identifier(request: Request) -> str:
    """Extract client identifier from request"""
    # Reverse proxy setups
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"
