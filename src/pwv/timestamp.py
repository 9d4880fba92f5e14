"""Vault タイムスタンプのデコード

Vault は同じフィールドを "1543600800"（文字列）と 1543600800（数値）の
どちらの形でも返すため、両方を同じ UTC 時刻に変換する。
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from .exceptions import MalformedTimestamp

_INTEGER = re.compile(r"[+-]?[0-9]+")


def decode_timestamp(raw: bytes | str | int) -> datetime:
    """JSON スカラー（引用符付き・なし）を UTC の datetime に変換する。

    Args:
        raw: 生の JSON トークン（bytes / str）、またはデコード済みの int / str

    Returns:
        Unix エポック秒として解釈した timezone-aware な datetime

    Raises:
        MalformedTimestamp: 整数として解釈できない場合
    """
    if isinstance(raw, bool):
        raise MalformedTimestamp(raw)
    if isinstance(raw, int):
        text = str(raw)
    elif isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedTimestamp(raw, cause=e) from e
    elif isinstance(raw, str):
        text = raw
    else:
        raise MalformedTimestamp(raw)

    text = text.strip('"')
    if not _INTEGER.fullmatch(text):
        raise MalformedTimestamp(raw)
    try:
        return datetime.fromtimestamp(int(text), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedTimestamp(raw, cause=e) from e


def decode_optional_timestamp(raw: bytes | str | int | None) -> datetime | None:
    """フィールドが欠落または null の場合は None を返す。"""
    if raw is None:
        return None
    return decode_timestamp(raw)
