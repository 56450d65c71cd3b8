"""flagsnap: snapshot-based feature flag evaluation library."""

from .backoff import BackoffPolicy
from .config import FlagSnapConfig, load_config, parse_config
from .coordinator import RefreshCoordinator
from .engine import FlagEngine, build_engine
from .evaluator import Evaluator
from .exceptions import (
    ConfigError,
    ConfigErrorCodes,
    FetchError,
    FetchErrorCodes,
    FlagSnapError,
    ValidationError,
    ValidationErrorCodes,
)
from .fetcher import HttpRemoteFetcher, RemoteFetcher
from .guard import feature_gate
from .health import CheckResult, FlagSyncHealthCheck, HealthStatus
from .logger import new_logger
from .memory import InMemoryRemoteFetcher
from .models import (
    EvaluationResult,
    FlagValue,
    Provenance,
    RawFlagSet,
    RefreshState,
    Snapshot,
)
from .store import SnapshotStore
from .validation import validate_flags

__all__ = [
    "BackoffPolicy",
    "CheckResult",
    "ConfigError",
    "ConfigErrorCodes",
    "EvaluationResult",
    "Evaluator",
    "FetchError",
    "FetchErrorCodes",
    "FlagEngine",
    "FlagSnapConfig",
    "FlagSnapError",
    "FlagSyncHealthCheck",
    "FlagValue",
    "HealthStatus",
    "HttpRemoteFetcher",
    "InMemoryRemoteFetcher",
    "Provenance",
    "RawFlagSet",
    "RefreshCoordinator",
    "RefreshState",
    "RemoteFetcher",
    "Snapshot",
    "SnapshotStore",
    "ValidationError",
    "ValidationErrorCodes",
    "build_engine",
    "feature_gate",
    "load_config",
    "new_logger",
    "parse_config",
    "validate_flags",
]
