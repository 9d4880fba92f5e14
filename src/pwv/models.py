"""Vault API データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .exceptions import PwvError
from .timestamp import decode_optional_timestamp


def _str_field(data: dict[str, Any], key: str) -> str:
    """文字列フィールドを取り出す。欠落と null は空文字列、それ以外の型は TypeError。"""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _int_field(data: dict[str, Any], key: str) -> int:
    """整数フィールドを取り出す。欠落と null は 0。"""
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key} must be an integer, got {type(value).__name__}")
    return value


@dataclass
class AccountProperties:
    """アカウントのプロパティ。"""

    name: str = ""
    address: str = ""
    safe: str = ""
    username: str = ""
    last_used_by: str = ""
    last_used_date: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountProperties:
        return cls(
            name=_str_field(data, "Name"),
            address=_str_field(data, "Address"),
            safe=_str_field(data, "Safe"),
            username=_str_field(data, "Username"),
            last_used_by=_str_field(data, "LastUsedBy"),
            last_used_date=decode_optional_timestamp(data.get("LastUsedDate")),
        )


@dataclass
class AccountDetails:
    """リクエスト対象アカウントの詳細。"""

    account_id: str = ""
    properties: AccountProperties = field(default_factory=AccountProperties)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountDetails:
        return cls(
            account_id=_str_field(data, "AccountID"),
            properties=AccountProperties.from_dict(data.get("Properties") or {}),
        )


@dataclass
class IncomingRequest:
    """承認待ちの受信リクエスト。"""

    request_id: str
    requestor_user_name: str
    user_reason: str = ""
    operation: str = ""
    access_from: datetime | None = None
    access_to: datetime | None = None
    account_details: AccountDetails = field(default_factory=AccountDetails)

    @property
    def account_name(self) -> str:
        return self.account_details.properties.name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IncomingRequest:
        """API レスポンス辞書から IncomingRequest を生成する。"""
        return cls(
            request_id=_str_field(data, "RequestID"),
            requestor_user_name=_str_field(data, "RequestorUserName"),
            user_reason=_str_field(data, "UserReason"),
            operation=_str_field(data, "Operation"),
            access_from=decode_optional_timestamp(data.get("AccessFrom")),
            access_to=decode_optional_timestamp(data.get("AccessTo")),
            account_details=AccountDetails.from_dict(data.get("AccountDetails") or {}),
        )


@dataclass
class IncomingRequestsResponse:
    """受信リクエスト一覧レスポンス。"""

    incoming_requests: list[IncomingRequest]
    total: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IncomingRequestsResponse:
        return cls(
            incoming_requests=[
                IncomingRequest.from_dict(r) for r in data.get("IncomingRequests") or []
            ],
            total=_int_field(data, "Total"),
        )


@dataclass
class MyRequest:
    """自分が申請したリクエスト。"""

    status: int = 0
    status_title: str = ""
    account_details: AccountDetails = field(default_factory=AccountDetails)

    @property
    def account_id(self) -> str:
        return self.account_details.account_id

    @property
    def account_name(self) -> str:
        return self.account_details.properties.name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MyRequest:
        """API レスポンス辞書から MyRequest を生成する。"""
        return cls(
            status=_int_field(data, "Status"),
            status_title=_str_field(data, "StatusTitle"),
            account_details=AccountDetails.from_dict(data.get("AccountDetails") or {}),
        )


@dataclass
class MyRequestsResponse:
    """自分のリクエスト一覧レスポンス。"""

    my_requests: list[MyRequest]
    error_code: str = ""
    error_message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MyRequestsResponse:
        return cls(
            my_requests=[MyRequest.from_dict(r) for r in data.get("MyRequests") or []],
            error_code=_str_field(data, "ErrorCode"),
            error_message=_str_field(data, "ErrorMessage"),
        )


@dataclass
class LogonRequest:
    """ログインリクエスト。"""

    username: str
    password: str
    use_radius_authentication: bool = False
    connection_number: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "password": self.password,
            "useRadiusAuthentication": self.use_radius_authentication,
            "connectionNumber": self.connection_number,
        }

    def __repr__(self) -> str:
        return f"LogonRequest(username={self.username!r}, password='***')"


@dataclass
class ConfirmRequest:
    """承認リクエスト。"""

    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"Reason": self.reason}


@dataclass
class CredentialResult:
    """一括取得における 1 件分の結果。credential か error のどちらか一方が入る。"""

    request: MyRequest
    credential: str | None = None
    error: PwvError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        return (
            f"CredentialResult(account={self.request.account_name!r}, "
            f"ok={self.ok}, error={self.error!r})"
        )


class ApprovalOutcome(StrEnum):
    """承認フローにおける 1 件の処理結果。"""

    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    IGNORED = "IGNORED"


@dataclass
class ApprovalResult:
    """承認フローの 1 件分の結果。"""

    request: IncomingRequest
    outcome: ApprovalOutcome
    error: PwvError | None = None


@dataclass
class VaultClientConfig:
    """Vault クライアント設定。"""

    base_url: str
    timeout_seconds: float = 30.0
    verify_tls: bool = True
