#!/usr/bin/env python3
"""
Per-signer single-flight executor.

Every job submitted for the same signer address runs on that signer's one
worker thread, in submission order, so transactions from one key are never
interleaved and nonces cannot collide. Different signers get different
workers and proceed concurrently.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)


class SignerQueue:
    def __init__(self):
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = threading.Lock()

    def _executor_for(self, signer: str) -> ThreadPoolExecutor:
        key = signer.lower()
        with self._lock:
            executor = self._executors.get(key)
            if executor is None:
                executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"signer-{key[:10]}")
                self._executors[key] = executor
                logger.debug(f"Started signer worker for {signer}")
            return executor

    def submit(self, signer: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        return self._executor_for(signer).submit(fn, *args, **kwargs)

    def run(self, signer: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Queue ``fn`` behind earlier jobs for ``signer`` and wait for its result"""
        return self.submit(signer, fn, *args, **kwargs).result()

    def signer_count(self) -> int:
        with self._lock:
            return len(self._executors)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executors = list(self._executors.values())
            self._executors.clear()
        for executor in executors:
            executor.shutdown(wait=wait)
