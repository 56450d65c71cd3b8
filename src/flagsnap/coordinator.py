"""RefreshCoordinator — asyncio Task ベースのフラグ同期ループ"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable
from types import TracebackType

import structlog

from .backoff import BackoffPolicy
from .config import FlagSnapConfig
from .exceptions import FetchError, FetchErrorCodes, FlagSnapError, ValidationError
from .fetcher import HttpRemoteFetcher, RemoteFetcher
from .health import CheckResult, HealthStatus
from .metrics import fetch_errors_total, fetch_total, stale_total
from .models import RefreshState, Snapshot
from .store import SnapshotStore
from .validation import validate_flags

StaleCallback = Callable[[Snapshot], None]

logger = structlog.get_logger(__name__)


class RefreshCoordinator:
    """リモートからフラグを取得し、検証してストアへ公開するコーディネーター。

    ストアへの書き込みはこのクラスだけが行う。取得・検証の失敗はここで
    吸収され、前回のスナップショットが有効なまま残る。
    """

    def __init__(
        self,
        fetcher: RemoteFetcher,
        store: SnapshotStore,
        *,
        poll_interval: float = 30.0,
        staleness_ceiling: float = 300.0,
        backoff: BackoffPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_stale: StaleCallback | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._poll_interval = poll_interval
        self._staleness_ceiling = staleness_ceiling
        self._backoff = backoff or BackoffPolicy()
        self._clock = clock
        self._on_stale = on_stale
        self._lock = asyncio.Lock()
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._state = RefreshState.IDLE
        self._consecutive_failures = 0
        self._last_error: FlagSnapError | None = None
        self._stale_signaled = False

    @classmethod
    def from_config(
        cls,
        config: FlagSnapConfig,
        store: SnapshotStore,
        *,
        fetcher: RemoteFetcher | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_stale: StaleCallback | None = None,
    ) -> RefreshCoordinator:
        """設定から HTTP フェッチャー付きのコーディネーターを生成する。"""
        if fetcher is None:
            fetcher = HttpRemoteFetcher(
                config.base_url,
                path=config.path,
                timeout_seconds=config.fetch_timeout,
                api_key=config.api_key,
            )
        return cls(
            fetcher,
            store,
            poll_interval=config.poll_interval,
            staleness_ceiling=config.staleness_ceiling,
            backoff=config.backoff_policy(),
            clock=clock,
            on_stale=on_stale,
        )

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def last_error(self) -> FlagSnapError | None:
        return self._last_error

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh_once(self) -> bool:
        """取得・検証・公開を 1 回実行する。新しいスナップショットを公開したら True。"""
        async with self._lock:
            self._state = RefreshState.FETCHING
            fetch_total.add(1)
            current = self._store.current()
            try:
                outcome = await self._fetcher.fetch(current.etag)
            except asyncio.CancelledError:
                self._state = RefreshState.IDLE
                raise
            except Exception as e:
                outcome = FetchError(
                    code=FetchErrorCodes.UNREACHABLE,
                    message=f"Fetcher raised unexpectedly: {e}",
                    cause=e,
                )

            if isinstance(outcome, FetchError):
                self._record_failure(outcome, current)
                return False

            if outcome.not_modified:
                # 内容は変わらないが鮮度を更新するため、次の version として公開する
                self._state = RefreshState.PUBLISHING
                snapshot = current.renewed(current.version + 1, self._clock())
                self._store.publish(snapshot)
                self._record_success()
                logger.debug("snapshot_confirmed", version=snapshot.version)
                return True

            try:
                flags = validate_flags(outcome.flags)
            except ValidationError as e:
                self._record_failure(e, current)
                return False

            self._state = RefreshState.PUBLISHING
            snapshot = Snapshot(
                flags=flags,
                version=current.version + 1,
                fetched_at=self._clock(),
                etag=outcome.etag,
            )
            self._store.publish(snapshot)
            self._record_success()
            logger.info(
                "snapshot_published",
                version=snapshot.version,
                flag_count=len(snapshot),
            )
            return True

    def notify(self) -> None:
        """プッシュ通知を受けたときに呼ぶ。待機中のループを即座に起こす。"""
        self._wakeup.set()

    def check_staleness(self) -> bool:
        """現在のスナップショットが鮮度上限を超えているか判定し、初回のみ通知する。"""
        snapshot = self._store.current()
        stale = snapshot.version > 0 and snapshot.age(self._clock()) >= self._staleness_ceiling
        if not stale:
            self._stale_signaled = False
            return False
        if not self._stale_signaled:
            self._stale_signaled = True
            stale_total.add(1)
            logger.warning(
                "snapshot_stale",
                version=snapshot.version,
                age_seconds=round(snapshot.age(self._clock()), 3),
                consecutive_failures=self._consecutive_failures,
            )
            if self._on_stale is not None:
                try:
                    self._on_stale(snapshot)
                except Exception as e:
                    logger.warning("stale_callback_failed", error=str(e))
        return True

    def health(self) -> CheckResult:
        """同期状態を返す。鮮度上限超過や未取得の場合は DEGRADED。"""
        snapshot = self._store.current()
        if snapshot.version == 0:
            return CheckResult(
                status=HealthStatus.DEGRADED,
                message="no flag snapshot has been fetched yet",
            )
        if self.check_staleness():
            return CheckResult(
                status=HealthStatus.DEGRADED,
                message=(
                    f"snapshot v{snapshot.version} is stale "
                    f"({self._consecutive_failures} consecutive failures)"
                ),
            )
        return CheckResult(status=HealthStatus.HEALTHY)

    def next_delay(self) -> float:
        """次の取得までの待機秒数。失敗中はバックオフ間隔を使う。"""
        if self._consecutive_failures:
            return self._backoff.compute_delay(self._consecutive_failures)
        return self._poll_interval

    async def start(self, *, wait_for_initial: bool = True) -> None:
        """同期ループを開始する。

        Args:
            wait_for_initial: True の場合、最初の取得が終わるまで待ってから戻る
        """
        if self.running:
            return
        self._state = RefreshState.IDLE
        if wait_for_initial:
            await self.refresh_once()
        self._task = asyncio.create_task(self._run(skip_first=wait_for_initial))

    async def stop(self) -> None:
        """同期ループを停止する。取得中であればキャンセルする。"""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self._state = RefreshState.STOPPED

    async def __aenter__(self) -> RefreshCoordinator:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    def _record_failure(self, error: FlagSnapError, current: Snapshot) -> None:
        self._consecutive_failures += 1
        self._last_error = error
        self._state = RefreshState.BACKING_OFF
        fetch_errors_total.add(1, {"code": error.code})
        logger.warning(
            "fetch_failed",
            code=error.code,
            error=str(error),
            consecutive_failures=self._consecutive_failures,
            version=current.version,
        )
        self.check_staleness()

    def _record_success(self) -> None:
        self._consecutive_failures = 0
        self._last_error = None
        self._stale_signaled = False
        self._state = RefreshState.IDLE

    async def _run(self, *, skip_first: bool) -> None:
        """ポーリングループ。"""
        refresh = not skip_first
        while True:
            delay = self._poll_interval
            try:
                if refresh:
                    await self.refresh_once()
                delay = self.next_delay()
            except Exception as e:
                logger.error("refresh_loop_error", error=str(e))
            refresh = True
            await self._wait(delay)

    async def _wait(self, delay: float) -> None:
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
        self._wakeup.clear()
        if self._state == RefreshState.BACKING_OFF:
            self._state = RefreshState.IDLE
