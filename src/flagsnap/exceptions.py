"""flagsnap の例外型定義"""

from __future__ import annotations


class FlagSnapError(Exception):
    """flagsnap ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FetchErrorCodes:
    """FetchError のエラーコード定数。"""

    UNREACHABLE: str = "UNREACHABLE"
    TIMEOUT: str = "TIMEOUT"
    MALFORMED_PAYLOAD: str = "MALFORMED_PAYLOAD"


class FetchError(FlagSnapError):
    """リモート取得の失敗。fetch() は送出せずに返り値として返す。"""


class ValidationErrorCodes:
    """ValidationError のエラーコード定数。"""

    BAD_KEY: str = "BAD_KEY"
    BAD_TYPE: str = "BAD_TYPE"


class ValidationError(FlagSnapError):
    """取得したフラグセットの検証エラー。"""

    def __init__(
        self,
        code: str,
        message: str,
        key: object = None,
    ) -> None:
        super().__init__(code, message)
        self.key = key


class ConfigErrorCodes:
    """ConfigError のエラーコード定数。"""

    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class ConfigError(FlagSnapError):
    """設定の読み込み・検証エラー。"""
