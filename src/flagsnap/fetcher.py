"""RemoteFetcher プロトコルと HTTP 実装"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Protocol

import httpx
from opentelemetry import trace

from .exceptions import FetchError, FetchErrorCodes
from .metrics import fetch_duration_seconds
from .models import RawFlagSet

_tracer = trace.get_tracer("flagsnap")


class RemoteFetcher(Protocol):
    """リモート設定サービスからフラグセットを 1 回取得するプロトコル。

    失敗は送出せず FetchError を返す。ストアには一切触れない。
    """

    async def fetch(self, etag: str | None = None) -> RawFlagSet | FetchError: ...


class HttpRemoteFetcher:
    """httpx を使った HTTP ポーリング用 RemoteFetcher。

    etag が渡された場合は If-None-Match による条件付き取得を行う。
    """

    def __init__(
        self,
        base_url: str,
        *,
        path: str = "/api/v1/flags",
        timeout_seconds: float = 5.0,
        api_key: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._path = path
        self._timeout = timeout_seconds
        headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            headers["X-API-Key"] = api_key
        self._headers = headers
        self._transport = transport

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def fetch(self, etag: str | None = None) -> RawFlagSet | FetchError:
        """フラグセットを取得する。"""
        started = time.monotonic()
        with _tracer.start_as_current_span("flagsnap.fetch") as span:
            try:
                result = await self._fetch_raw(etag)
            except FetchError as e:
                span.set_attribute("flagsnap.error_code", e.code)
                return e
            finally:
                fetch_duration_seconds.record(time.monotonic() - started)
            span.set_attribute("flagsnap.not_modified", result.not_modified)
            return result

    async def _fetch_raw(self, etag: str | None) -> RawFlagSet:
        headers: dict[str, str] = {}
        if etag:
            headers["If-None-Match"] = etag
        try:
            # httpx のタイムアウトは接続・読み取りごとの上限なので、往復全体にも期限を設ける
            resp = await asyncio.wait_for(self._get(headers), timeout=self._timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise FetchError(
                code=FetchErrorCodes.TIMEOUT,
                message=f"Flag fetch timed out after {self._timeout}s",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(
                code=FetchErrorCodes.UNREACHABLE,
                message=f"Failed to reach flag service: {e}",
                cause=e,
            ) from e
        except Exception as e:
            raise FetchError(
                code=FetchErrorCodes.UNREACHABLE,
                message=f"Failed to fetch flags: {e}",
                cause=e,
            ) from e

        if resp.status_code == 304:
            return RawFlagSet(etag=etag, not_modified=True)
        if resp.status_code >= 400:
            raise FetchError(
                code=FetchErrorCodes.UNREACHABLE,
                message=f"Flag service returned HTTP {resp.status_code}: {resp.text}",
            )

        flags = _parse_body(resp)
        return RawFlagSet(flags=flags, etag=resp.headers.get("ETag"))

    async def _get(self, headers: dict[str, str]) -> httpx.Response:
        async with self._make_client() as client:
            return await client.get(self._path, headers=headers)


def _parse_body(resp: httpx.Response) -> dict[str, Any]:
    """レスポンス本文を {"flags": {...}} または素のオブジェクトとして解釈する。"""
    try:
        data = resp.json()
    except ValueError as e:
        raise FetchError(
            code=FetchErrorCodes.MALFORMED_PAYLOAD,
            message="Flag payload is not valid JSON",
            cause=e,
        ) from e
    if isinstance(data, dict) and isinstance(data.get("flags"), dict):
        data = data["flags"]
    if not isinstance(data, dict):
        raise FetchError(
            code=FetchErrorCodes.MALFORMED_PAYLOAD,
            message=f"Flag payload must be a JSON object, got {type(data).__name__}",
        )
    return data
