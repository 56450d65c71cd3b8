"""Evaluator: アプリケーションコード向けの読み取り API"""

from __future__ import annotations

import time
from collections.abc import Callable

from .metrics import evaluations_total
from .models import EvaluationResult, FlagValue, Provenance
from .store import SnapshotStore


class Evaluator:
    """現在のスナップショットに対してフラグを評価する。

    ネットワーク I/O は行わず、例外も送出しない。値が得られない場合は
    呼び出し元が渡したデフォルト値を返す（fail-open）。
    """

    def __init__(
        self,
        store: SnapshotStore,
        staleness_ceiling: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._staleness_ceiling = staleness_ceiling
        self._clock = clock

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def evaluate(self, key: str, default: FlagValue = None) -> EvaluationResult:
        """フラグを評価する。"""
        snapshot = self._store.current()
        value = snapshot.get(key)
        if value is None:
            result = EvaluationResult(
                flag_key=key,
                value=default,
                provenance=Provenance.DEFAULT_FALLBACK,
                version=snapshot.version,
            )
        else:
            age = snapshot.age(self._clock())
            result = EvaluationResult(
                flag_key=key,
                value=value,
                provenance=Provenance.FRESH if age < self._staleness_ceiling else Provenance.STALE,
                version=snapshot.version,
            )
        evaluations_total.add(1, {"provenance": result.provenance.value})
        return result

    def is_enabled(self, key: str, default: bool = False) -> bool:
        """真偽値フラグを返す。bool 以外の値が入っている場合は default を返す。"""
        value = self.evaluate(key, default).value
        return value if isinstance(value, bool) else default

    def get_string(self, key: str, default: str = "") -> str:
        """文字列フラグを返す。str 以外の値が入っている場合は default を返す。"""
        value = self.evaluate(key, default).value
        return value if isinstance(value, str) else default
