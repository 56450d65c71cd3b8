"""InMemoryRemoteFetcher 実装"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any

from .exceptions import FetchError
from .models import RawFlagSet


class InMemoryRemoteFetcher:
    """テスト用インメモリ RemoteFetcher。

    enqueue した結果を順に返し、キューが空になると set_flags で設定した
    フラグセットを返し続ける。
    """

    def __init__(
        self,
        flags: dict[str, Any] | None = None,
        *,
        delay: float = 0.0,
    ) -> None:
        self._flags: dict[str, Any] = dict(flags or {})
        self._queue: deque[RawFlagSet | FetchError] = deque()
        self._delay = delay
        self.calls = 0
        self.etags_seen: list[str | None] = []

    def set_flags(self, flags: dict[str, Any]) -> None:
        """キューが空のときに返すフラグセットを設定する。"""
        self._flags = dict(flags)

    def enqueue(self, *results: RawFlagSet | FetchError) -> None:
        """次回以降の fetch() の結果を積む。"""
        self._queue.extend(results)

    async def fetch(self, etag: str | None = None) -> RawFlagSet | FetchError:
        self.calls += 1
        self.etags_seen.append(etag)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._queue:
            return self._queue.popleft()
        return RawFlagSet(flags=dict(self._flags))
