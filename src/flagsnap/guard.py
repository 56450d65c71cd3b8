"""feature_gate: フラグで呼び出しを制御する高階関数"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from .evaluator import Evaluator

F = TypeVar("F", bound=Callable[..., Any])


def feature_gate(
    evaluator: Evaluator,
    key: str,
    *,
    default: bool = False,
    fallback: Any = None,
) -> Callable[[F], F]:
    """フラグが無効なら本体を呼ばずにフォールバックを返すデコレーターを作る。

    fallback が呼び出し可能であれば元の引数でそれを呼び、そうでなければ値として返す。
    async 関数を包んだ場合、フォールバックが coroutine function ならそれも await する。

    Example:
        @feature_gate(evaluator, "new-checkout", fallback=legacy_checkout)
        async def checkout(order): ...
    """

    def decorator(fn: F) -> F:
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                if evaluator.is_enabled(key, default):
                    return await fn(*args, **kwargs)
                if callable(fallback):
                    result = fallback(*args, **kwargs)
                    if inspect.isawaitable(result):
                        return await result
                    return result
                return fallback

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if evaluator.is_enabled(key, default):
                return fn(*args, **kwargs)
            if callable(fallback):
                return fallback(*args, **kwargs)
            return fallback

        return wrapper  # type: ignore[return-value]

    return decorator
