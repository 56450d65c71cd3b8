"""RawFlagSet の検証"""

from __future__ import annotations

from typing import Any

from .exceptions import ValidationError, ValidationErrorCodes


def validate_flags(raw: dict[str, Any]) -> dict[str, bool | str]:
    """受信したフラグを検証し、型付きの辞書を返す。

    キーは空でない文字列、値は bool または str でなければならない。
    最初に見つかった違反で ValidationError を送出する。
    """
    validated: dict[str, bool | str] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not key.strip():
            raise ValidationError(
                code=ValidationErrorCodes.BAD_KEY,
                message=f"Flag key must be a non-empty string: {key!r}",
                key=key,
            )
        if not isinstance(value, (bool, str)):
            raise ValidationError(
                code=ValidationErrorCodes.BAD_TYPE,
                message=f"Flag {key!r} has unsupported type {type(value).__name__}",
                key=key,
            )
        validated[key] = value
    return validated
