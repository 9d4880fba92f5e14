"""承認フローのユニットテスト"""

import json
from typing import Any

import httpx
import pytest
import respx
from pwv.approval import approve_incoming, is_allowed, parse_allowed_users
from pwv.exceptions import DecodeError, NotAuthenticated, RemoteError
from pwv.http_client import INCOMING_REQUESTS_PATH, HttpVaultClient
from pwv.models import ApprovalOutcome, VaultClientConfig

BASE_URL = "https://pwv.test"
TOKEN = "tok-123"


def make_client() -> HttpVaultClient:
    client = HttpVaultClient(VaultClientConfig(base_url=BASE_URL))
    client._token = TOKEN
    return client


def test_parse_allowed_users() -> None:
    assert parse_allowed_users(" alice, BOB ,,Carol ") == {"alice", "bob", "carol"}
    assert parse_allowed_users("") == frozenset()
    assert parse_allowed_users(" , ") == frozenset()
    assert parse_allowed_users(["Alice", " "]) == {"alice"}


def test_is_allowed_case_insensitive() -> None:
    allowed = parse_allowed_users("alice")
    assert is_allowed("ALICE", allowed)
    assert is_allowed("Alice", allowed)
    assert not is_allowed("bob", allowed)


@respx.mock
def test_approve_confirms_only_allowed(incoming_response: dict[str, Any]) -> None:
    """ALICE は承認され bob には触れないこと（大文字小文字を区別しない）。"""
    respx.get(f"{BASE_URL}{INCOMING_REQUESTS_PATH}").mock(
        return_value=httpx.Response(200, json=incoming_response)
    )
    alice = respx.post(f"{BASE_URL}{INCOMING_REQUESTS_PATH}/18_4/Confirm").mock(
        return_value=httpx.Response(200)
    )
    bob = respx.post(f"{BASE_URL}{INCOMING_REQUESTS_PATH}/18_5/Confirm").mock(
        return_value=httpx.Response(200)
    )

    results = approve_incoming(make_client(), parse_allowed_users("alice"), "approved")

    assert alice.call_count == 1
    assert json.loads(alice.calls.last.request.content) == {"Reason": "approved"}
    assert not bob.called
    assert [r.outcome for r in results] == [ApprovalOutcome.CONFIRMED, ApprovalOutcome.IGNORED]
    assert all(r.error is None for r in results)


@respx.mock
def test_approve_continues_after_failure(incoming_response: dict[str, Any]) -> None:
    """1 件の承認失敗で残りの処理が止まらないこと。"""
    respx.get(f"{BASE_URL}{INCOMING_REQUESTS_PATH}").mock(
        return_value=httpx.Response(200, json=incoming_response)
    )
    respx.post(f"{BASE_URL}{INCOMING_REQUESTS_PATH}/18_4/Confirm").mock(
        return_value=httpx.Response(
            400, json={"ErrorCode": "PASWS211E", "ErrorMessage": "already confirmed"}
        )
    )
    second = respx.post(f"{BASE_URL}{INCOMING_REQUESTS_PATH}/18_5/Confirm").mock(
        return_value=httpx.Response(200)
    )

    results = approve_incoming(make_client(), parse_allowed_users("alice,BOB"), "ok")

    assert [r.outcome for r in results] == [ApprovalOutcome.FAILED, ApprovalOutcome.CONFIRMED]
    assert isinstance(results[0].error, RemoteError)
    assert second.called


@respx.mock
def test_approve_no_requests() -> None:
    respx.get(f"{BASE_URL}{INCOMING_REQUESTS_PATH}").mock(
        return_value=httpx.Response(200, json={"IncomingRequests": [], "Total": 0})
    )
    assert approve_incoming(make_client(), parse_allowed_users("alice"), "ok") == []


def test_approve_requires_login() -> None:
    client = HttpVaultClient(VaultClientConfig(base_url=BASE_URL))
    with pytest.raises(NotAuthenticated):
        approve_incoming(client, parse_allowed_users("alice"), "ok")


@respx.mock
def test_approve_null_requestor_is_ignored() -> None:
    """RequestorUserName が null のリクエストは例外にならず無視されること。"""
    respx.get(f"{BASE_URL}{INCOMING_REQUESTS_PATH}").mock(
        return_value=httpx.Response(
            200,
            json={"IncomingRequests": [{"RequestID": "1", "RequestorUserName": None}]},
        )
    )
    results = approve_incoming(make_client(), parse_allowed_users("alice"), "ok")
    assert [r.outcome for r in results] == [ApprovalOutcome.IGNORED]
    assert results[0].request.requestor_user_name == ""


@respx.mock
def test_approve_null_request_id_is_recorded_as_failure() -> None:
    """RequestID が null なら送信せずに FAILED として記録し、次へ進むこと。"""
    respx.get(f"{BASE_URL}{INCOMING_REQUESTS_PATH}").mock(
        return_value=httpx.Response(
            200,
            json={
                "IncomingRequests": [
                    {"RequestID": None, "RequestorUserName": "alice"},
                    {"RequestID": "2", "RequestorUserName": "alice"},
                ]
            },
        )
    )
    confirm = respx.post(f"{BASE_URL}{INCOMING_REQUESTS_PATH}/2/Confirm").mock(
        return_value=httpx.Response(200)
    )
    results = approve_incoming(make_client(), parse_allowed_users("alice"), "ok")
    assert [r.outcome for r in results] == [ApprovalOutcome.FAILED, ApprovalOutcome.CONFIRMED]
    assert isinstance(results[0].error, DecodeError)
    assert confirm.call_count == 1
