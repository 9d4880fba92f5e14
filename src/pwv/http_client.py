"""Vault HTTP REST クライアント実装"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog

from .client import VaultClient
from .exceptions import (
    AuthenticationFailed,
    DecodeError,
    NotAuthenticated,
    PwvError,
    RemoteError,
    TransportError,
)
from .models import (
    ConfirmRequest,
    IncomingRequest,
    IncomingRequestsResponse,
    LogonRequest,
    MyRequest,
    MyRequestsResponse,
    VaultClientConfig,
)

logger = structlog.get_logger(__name__)

_AUTH_SERVICE = "/PasswordVault/WebServices/auth/Cyberark/CyberArkAuthenticationService.svc"
LOGON_PATH = f"{_AUTH_SERVICE}/Logon"
LOGOFF_PATH = f"{_AUTH_SERVICE}/Logoff"
INCOMING_REQUESTS_PATH = "/PasswordVault/API/IncomingRequests"
MY_REQUESTS_PATH = "/PasswordVault/API/MyRequests"
ACCOUNTS_PATH = "/PasswordVault/WebServices/PIMServices.svc/Accounts"

T = TypeVar("T")


class HttpVaultClient(VaultClient):
    """httpx を使った CyberArk PasswordVault クライアント。

    login で得たトークンを Authorization ヘッダー（Bearer なし）として
    以降の全リクエストに付与する。各リクエストは専用の httpx.Client を
    with ブロック内で開閉する。
    """

    def __init__(self, config: VaultClientConfig) -> None:
        self._config = config
        self._token = ""
        if not config.verify_tls:
            logger.warning("TLS certificate verification disabled", base_url=config.base_url)

    @property
    def config(self) -> VaultClientConfig:
        return self._config

    @property
    def token(self) -> str:
        """セッショントークン。未ログインなら空文字列。"""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token != ""

    def _make_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._config.base_url,
            headers={"Content-Type": "application/json"},
            timeout=self._config.timeout_seconds,
            verify=self._config.verify_tls,
        )

    def _send(
        self,
        method: str,
        path: str,
        context: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {"Authorization": self._token} if authenticated else {}
        try:
            with self._make_client() as client:
                return client.request(method, path, params=params, json=json, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{context}: {e}", cause=e) from e

    @staticmethod
    def _decode_json(resp: httpx.Response, context: str) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise DecodeError(
                f"{context}: invalid JSON response (HTTP {resp.status_code})",
                cause=e,
            ) from e
        if not isinstance(data, dict):
            raise DecodeError(f"{context}: expected a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def _decode_model(
        factory: Callable[[dict[str, Any]], T],
        data: dict[str, Any],
        context: str,
    ) -> T:
        try:
            return factory(data)
        except PwvError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"{context}: unexpected response shape: {e}", cause=e) from e

    @staticmethod
    def _error_fields(data: dict[str, Any]) -> tuple[str, str]:
        return str(data.get("ErrorCode") or ""), str(data.get("ErrorMessage") or "")

    def _handle_error(self, resp: httpx.Response, context: str) -> None:
        """エラーステータスを RemoteError に変換する。ボディに ErrorCode があれば優先する。"""
        if not resp.is_error:
            return
        code, message = "", ""
        try:
            data = resp.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            code, message = self._error_fields(data)
        logger.debug("vault returned error status", context=context, status=resp.status_code)
        raise RemoteError(
            code or f"HTTP {resp.status_code}",
            message or f"{context}: {resp.reason_phrase}",
            status_code=resp.status_code,
        )

    def login(self, username: str, password: str) -> None:
        """ログインしてトークンを保持する。

        Raises:
            AuthenticationFailed: Vault がログインを拒否した場合（トークンは変更しない）
            DecodeError: レスポンスが JSON として不正な場合
            TransportError: 通信に失敗した場合
        """
        payload = LogonRequest(username=username, password=password)
        resp = self._send(
            "POST", LOGON_PATH, "login", json=payload.to_dict(), authenticated=False
        )
        try:
            data = self._decode_json(resp, "login")
        except DecodeError:
            self._handle_error(resp, "login")
            raise

        code, message = self._error_fields(data)
        if code:
            logger.info("login rejected", username=username, code=code)
            raise AuthenticationFailed(code, message)
        if resp.is_error:
            raise AuthenticationFailed(f"HTTP {resp.status_code}", resp.reason_phrase)

        token = data.get("CyberArkLogonResult")
        if not isinstance(token, str):
            raise DecodeError("login: response has no CyberArkLogonResult")
        if not token:
            raise AuthenticationFailed("EMPTY_TOKEN", "vault returned an empty logon token")
        self._token = token
        logger.info("logged in", username=username)

    def logout(self) -> None:
        """ログオフする。レスポンスボディは使わず、通信エラーのみ報告する。"""
        if not self._token:
            raise NotAuthenticated("no logon token; unable to logout")
        resp = self._send("POST", LOGOFF_PATH, "logout")
        logger.info("logged out", status=resp.status_code)

    def list_incoming_requests(self) -> IncomingRequestsResponse:
        """承認待ちかつ期限切れでない受信リクエストを取得する。"""
        if not self._token:
            raise NotAuthenticated()
        context = "list_incoming_requests"
        resp = self._send(
            "GET",
            INCOMING_REQUESTS_PATH,
            context,
            params={"onlywaiting": "true", "expired": "false"},
        )
        self._handle_error(resp, context)
        data = self._decode_json(resp, context)
        code, message = self._error_fields(data)
        if code:
            raise RemoteError(code, message, status_code=resp.status_code)
        result = self._decode_model(IncomingRequestsResponse.from_dict, data, context)
        logger.debug(
            "incoming requests fetched",
            count=len(result.incoming_requests),
            total=result.total,
        )
        return result

    def confirm_request(self, request: IncomingRequest | str, reason: str) -> None:
        """受信リクエストを承認する。

        HTTP 200 はボディに関係なく成功とみなす。それ以外はボディの
        ErrorCode を確認する。
        """
        request_id = request.request_id if isinstance(request, IncomingRequest) else request
        if not isinstance(request_id, str) or not request_id:
            raise DecodeError("confirm_request: request has no RequestID")
        context = f"confirm_request({request_id})"
        resp = self._send(
            "POST",
            f"{INCOMING_REQUESTS_PATH}/{quote(request_id, safe='')}/Confirm",
            context,
            json=ConfirmRequest(reason=reason).to_dict(),
        )
        if resp.status_code == 200:
            logger.debug("request confirmed", request_id=request_id)
            return

        data = self._decode_json(resp, context)
        code, message = self._error_fields(data)
        if code:
            raise RemoteError(code, message, status_code=resp.status_code)
        self._handle_error(resp, context)
        logger.debug("request confirmed", request_id=request_id, status=resp.status_code)

    def list_my_requests(self) -> MyRequestsResponse:
        """自分が申請したリクエスト（承認待ち以外も含む、期限切れを除く）を取得する。"""
        context = "list_my_requests"
        resp = self._send(
            "GET",
            MY_REQUESTS_PATH,
            context,
            params={"onlywaiting": "false", "expired": "false"},
        )
        self._handle_error(resp, context)
        data = self._decode_json(resp, context)
        result = self._decode_model(MyRequestsResponse.from_dict, data, context)
        if result.error_code:
            raise RemoteError(result.error_code, result.error_message, status_code=resp.status_code)
        logger.debug("my requests fetched", count=len(result.my_requests))
        return result

    def get_credential(self, request: MyRequest) -> str:
        """アカウントのクレデンシャルを取得し、レスポンスボディをそのまま返す。"""
        account_id = request.account_id
        if not isinstance(account_id, str) or not account_id:
            raise DecodeError("get_credential: request has no AccountID")
        context = f"get_credential({account_id})"
        resp = self._send(
            "GET",
            f"{ACCOUNTS_PATH}/{quote(account_id, safe='')}/Credentials",
            context,
        )
        self._handle_error(resp, context)
        return resp.text
