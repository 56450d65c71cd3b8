"""バックオフ間隔の計算"""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class BackoffPolicy:
    """指数バックオフ設定（秒単位）。"""

    initial_delay: float = 0.5
    max_delay: float = 60.0
    multiplier: float = 2.0
    jitter: bool = True

    def compute_delay(self, failures: int) -> float:
        """連続失敗回数 failures (1 以上) に対する待機秒数を返す。"""
        # 上限に達した時点で乗算をやめ、大きな multiplier でも溢れないようにする
        delay = self.initial_delay
        for _ in range(max(failures - 1, 0)):
            if delay >= self.max_delay or self.multiplier <= 1.0:
                break
            delay *= self.multiplier
        capped = min(delay, self.max_delay)
        if self.jitter:
            return min(capped * (0.9 + random.random() * 0.2), self.max_delay)
        return capped
