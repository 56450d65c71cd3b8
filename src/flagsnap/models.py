"""flagsnap データモデル"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import Any

# None は「値なし」を表し、False とは区別される
FlagValue = bool | str | None


class Provenance(StrEnum):
    """評価値の由来。"""

    FRESH = "fresh"
    STALE = "stale"
    DEFAULT_FALLBACK = "default-fallback"


class RefreshState(StrEnum):
    """RefreshCoordinator の状態。"""

    IDLE = "IDLE"
    FETCHING = "FETCHING"
    PUBLISHING = "PUBLISHING"
    BACKING_OFF = "BACKING_OFF"
    STOPPED = "STOPPED"


@dataclass(frozen=True)
class Snapshot:
    """ある時点の全フラグ値。生成後は変更されず、次のスナップショットで丸ごと置き換えられる。"""

    flags: Mapping[str, bool | str]
    version: int
    fetched_at: float
    etag: str | None = None

    def __post_init__(self) -> None:
        # 呼び出し元の辞書をコピーして読み取り専用にする
        object.__setattr__(self, "flags", MappingProxyType(dict(self.flags)))

    @classmethod
    def empty(cls, fetched_at: float = 0.0) -> Snapshot:
        """起動直後に使う version 0 の空スナップショット。"""
        return cls(flags={}, version=0, fetched_at=fetched_at)

    def get(self, key: str) -> FlagValue:
        return self.flags.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.flags

    def __len__(self) -> int:
        return len(self.flags)

    def age(self, now: float) -> float:
        """fetched_at からの経過秒数。"""
        return max(0.0, now - self.fetched_at)

    def renewed(self, version: int, fetched_at: float) -> Snapshot:
        """同じフラグと etag を持つ、新しい version と取得時刻のコピーを返す。"""
        return replace(self, version=version, fetched_at=fetched_at)


@dataclass
class RawFlagSet:
    """リモートから受信した未検証のフラグセット。"""

    flags: dict[str, Any] = field(default_factory=dict)
    etag: str | None = None
    not_modified: bool = False


@dataclass(frozen=True)
class EvaluationResult:
    """フラグ評価結果。"""

    flag_key: str
    value: FlagValue
    provenance: Provenance
    version: int = 0

    @property
    def is_default(self) -> bool:
        return self.provenance == Provenance.DEFAULT_FALLBACK
