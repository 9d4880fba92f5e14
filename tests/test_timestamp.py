"""タイムスタンプデコードのユニットテスト"""

from datetime import datetime, timezone

import pytest
from pwv.exceptions import MalformedTimestamp, PwvErrorCodes
from pwv.timestamp import decode_optional_timestamp, decode_timestamp


@pytest.mark.parametrize("value", [0, 1543388400, 1543600800, 2147483648])
def test_quoted_and_bare_decode_to_same_instant(value: int) -> None:
    """引用符付き・なしの両形式が同じ時刻になること。"""
    expected = datetime.fromtimestamp(value, tz=timezone.utc)
    assert decode_timestamp(f'"{value}"') == expected
    assert decode_timestamp(str(value)) == expected
    assert decode_timestamp(f'"{value}"'.encode()) == expected
    assert decode_timestamp(value) == expected


def test_result_is_utc() -> None:
    ts = decode_timestamp("1543600800")
    assert ts.tzinfo == timezone.utc
    assert ts == datetime(2018, 11, 30, 18, 0, tzinfo=timezone.utc)
    assert ts.timestamp() == 1543600800


def test_negative_value() -> None:
    assert decode_timestamp('"-60"') == datetime(1969, 12, 31, 23, 59, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "raw",
    ['"abc"', "", '""', "12.5", '"12a"', " 12", "1_000", b"\xff\xfe", "null"],
)
def test_malformed(raw: str | bytes) -> None:
    """数値として解釈できない入力で MalformedTimestamp が発生すること。"""
    with pytest.raises(MalformedTimestamp) as exc_info:
        decode_timestamp(raw)
    assert exc_info.value.code == PwvErrorCodes.MALFORMED_TIMESTAMP
    assert exc_info.value.raw == raw


def test_bool_rejected() -> None:
    with pytest.raises(MalformedTimestamp):
        decode_timestamp(True)


def test_float_rejected() -> None:
    with pytest.raises(MalformedTimestamp):
        decode_timestamp(1543600800.5)  # type: ignore[arg-type]


def test_out_of_range() -> None:
    with pytest.raises(MalformedTimestamp):
        decode_timestamp("99999999999999999999")


def test_optional_none() -> None:
    assert decode_optional_timestamp(None) is None
    assert decode_optional_timestamp(1543404976) == datetime.fromtimestamp(
        1543404976, tz=timezone.utc
    )
