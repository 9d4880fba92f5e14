"""VaultClient 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

import structlog

from .exceptions import PwvError
from .models import (
    CredentialResult,
    IncomingRequest,
    IncomingRequestsResponse,
    MyRequest,
    MyRequestsResponse,
)

logger = structlog.get_logger(__name__)


class VaultClient(ABC):
    """Vault クライアント抽象基底クラス。

    1 インスタンスが 1 セッションを保持する。スレッドセーフではない。
    """

    @abstractmethod
    def login(self, username: str, password: str) -> None:
        """ログインしてセッショントークンを保持する。"""
        ...

    @abstractmethod
    def logout(self) -> None:
        """ログオフする。トークンを持たない場合は NotAuthenticated。"""
        ...

    @abstractmethod
    def list_incoming_requests(self) -> IncomingRequestsResponse:
        """承認待ちの受信リクエストを取得する。"""
        ...

    @abstractmethod
    def confirm_request(self, request: IncomingRequest | str, reason: str) -> None:
        """受信リクエストを承認する。"""
        ...

    @abstractmethod
    def list_my_requests(self) -> MyRequestsResponse:
        """自分が申請したリクエストを取得する。"""
        ...

    @abstractmethod
    def get_credential(self, request: MyRequest) -> str:
        """承認済みリクエストのアカウントのクレデンシャルを取得する。"""
        ...

    def retrieve_credentials(self, requests: Iterable[MyRequest]) -> list[CredentialResult]:
        """各リクエストのクレデンシャルを順番に取得する。

        1 件の失敗で残りの取得は中断しない。入力と同じ順序で 1 件ずつ
        CredentialResult を返し、失敗した項目には error が入る。
        """
        results: list[CredentialResult] = []
        for request in requests:
            try:
                credential = self.get_credential(request)
            except PwvError as e:
                logger.warning(
                    "credential retrieval failed",
                    account=request.account_name,
                    account_id=request.account_id,
                    code=e.code,
                    error=str(e),
                )
                results.append(CredentialResult(request=request, error=e))
                continue
            results.append(CredentialResult(request=request, credential=credential))
        return results
