"""ストア・コーディネーター・評価器の組み立て"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from .config import FlagSnapConfig
from .coordinator import RefreshCoordinator, StaleCallback
from .evaluator import Evaluator
from .fetcher import RemoteFetcher
from .logger import new_logger
from .store import SnapshotStore


@dataclass
class FlagEngine:
    """設定から組み立てた 3 コンポーネントの組。

    グローバルには登録しない。evaluator を必要とするコンポーネントへ明示的に渡すこと。
    """

    store: SnapshotStore
    coordinator: RefreshCoordinator
    evaluator: Evaluator

    async def start(self, *, wait_for_initial: bool = True) -> None:
        await self.coordinator.start(wait_for_initial=wait_for_initial)

    async def stop(self) -> None:
        await self.coordinator.stop()


def build_engine(
    config: FlagSnapConfig,
    *,
    fetcher: RemoteFetcher | None = None,
    clock: Callable[[], float] = time.monotonic,
    on_stale: StaleCallback | None = None,
    configure_logging: bool = True,
) -> FlagEngine:
    """FlagSnapConfig から FlagEngine を生成する。fetcher 省略時は HTTP を使う。

    configure_logging が True の場合、log_level / log_format で structlog を設定する。
    ホストアプリケーションが自前でログを設定している場合は False を渡す。
    """
    if configure_logging:
        new_logger(config.log_level, config.log_format)
    store = SnapshotStore()
    coordinator = RefreshCoordinator.from_config(
        config, store, fetcher=fetcher, clock=clock, on_stale=on_stale
    )
    evaluator = Evaluator(store, config.staleness_ceiling, clock=clock)
    return FlagEngine(store=store, coordinator=coordinator, evaluator=evaluator)
