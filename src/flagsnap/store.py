"""SnapshotStore 実装"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from .models import Snapshot

SnapshotListener = Callable[[Snapshot, Snapshot], None]

logger = structlog.get_logger(__name__)


class SnapshotStore:
    """現在有効なスナップショットを 1 つだけ保持するストア。

    書き込みは RefreshCoordinator のみが行い、置き換えは参照の代入 1 回で完結する。
    読み取り側はロックを取らずに current() を呼び出せる。
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._current = initial if initial is not None else Snapshot.empty()
        self._listeners: list[SnapshotListener] = []

    def current(self) -> Snapshot:
        """最新の公開済みスナップショットを返す。"""
        return self._current

    def publish(self, snapshot: Snapshot) -> None:
        """スナップショットを置き換え、登録済みリスナーへ通知する。"""
        previous = self._current
        self._current = snapshot
        for listener in list(self._listeners):
            try:
                listener(previous, snapshot)
            except Exception as e:
                logger.warning(
                    "listener_failed",
                    version=snapshot.version,
                    error=str(e),
                )

    def subscribe(self, listener: SnapshotListener) -> None:
        """publish 後に (previous, current) で呼ばれるリスナーを登録する。"""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener) -> None:
        """リスナーの登録を解除する。未登録なら何もしない。"""
        if listener in self._listeners:
            self._listeners.remove(listener)
