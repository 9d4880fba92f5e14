"""許可リストに基づく受信リクエストの自動承認"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from .client import VaultClient
from .exceptions import PwvError
from .models import ApprovalOutcome, ApprovalResult

logger = structlog.get_logger(__name__)


def parse_allowed_users(value: str | Iterable[str]) -> frozenset[str]:
    """カンマ区切りのユーザー一覧（または名前のイテラブル）を casefold 済みの集合にする。

    空の要素は捨てる。
    """
    names = value.split(",") if isinstance(value, str) else value
    return frozenset(n.strip().casefold() for n in names if n.strip())


def is_allowed(requestor: str, allowed: frozenset[str]) -> bool:
    return requestor.strip().casefold() in allowed


def approve_incoming(
    client: VaultClient,
    allowed: frozenset[str],
    reason: str,
) -> list[ApprovalResult]:
    """許可されたリクエスト者からの承認待ちリクエストをすべて承認する。

    一覧の順に処理する。承認に失敗した場合は結果に記録して次へ進む。
    一覧取得の失敗は呼び出し元へ送出する。
    """
    response = client.list_incoming_requests()
    results: list[ApprovalResult] = []
    for request in response.incoming_requests:
        if not is_allowed(request.requestor_user_name, allowed):
            logger.debug("ignoring request", requestor=request.requestor_user_name)
            results.append(ApprovalResult(request=request, outcome=ApprovalOutcome.IGNORED))
            continue
        try:
            client.confirm_request(request, reason)
        except PwvError as e:
            logger.warning(
                "confirm failed",
                request_id=request.request_id,
                requestor=request.requestor_user_name,
                code=e.code,
                error=str(e),
            )
            results.append(
                ApprovalResult(request=request, outcome=ApprovalOutcome.FAILED, error=e)
            )
            continue
        logger.info(
            "request confirmed",
            request_id=request.request_id,
            requestor=request.requestor_user_name,
        )
        results.append(ApprovalResult(request=request, outcome=ApprovalOutcome.CONFIRMED))
    return results
