"""フラグ同期のヘルスチェック"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .coordinator import RefreshCoordinator


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single health check."""

    status: HealthStatus
    message: str | None = None


class FlagSyncHealthCheck:
    """RefreshCoordinator の状態を k1s0 health の HealthCheck 形式で公開する。

    check() は劣化時に例外を送出するため、HealthChecker に登録すると
    スナップショットが古くなった時点で unhealthy として集計される。
    """

    def __init__(self, coordinator: RefreshCoordinator, *, name: str = "featureflags") -> None:
        self._coordinator = coordinator
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def check(self) -> None:
        result = self._coordinator.health()
        if result.status != HealthStatus.HEALTHY:
            raise RuntimeError(result.message or f"flag sync is {result.status.value}")
