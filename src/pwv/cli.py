"""pwv コマンドラインインターフェース"""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from . import __version__
from .approval import approve_incoming, parse_allowed_users
from .client import VaultClient
from .config import PwvConfig, load
from .exceptions import ConfigError, PwvError, PwvErrorCodes
from .http_client import HttpVaultClient
from .logger import new_logger
from .models import ApprovalOutcome

CONFIG_ENV = "PWV_CONFIG"

EXAMPLES = """\
examples:
  pwv --username CORPKEY approve --allowed-users KEY1,Key2,KEY3
  pwv --username CORPKEY list
  pwv --username CORPKEY retrieve
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pwv",
        description="List, approve and retrieve CyberArk PasswordVault access requests.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help=f"YAML config file (default: ${CONFIG_ENV} if set)",
    )
    parser.add_argument("--url", help="The base URL for the PasswordVault")
    parser.add_argument("--username", help="The username to login with into CyberArk")
    parser.add_argument(
        "--password",
        help="The password. If not given, it's requested by the program",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        default=None,
        help="Skip TLS certificate verification (for intercepting proxies)",
    )
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-format", choices=["json", "text"])
    parser.set_defaults(allowed_users=None, reason=None)

    sub = parser.add_subparsers(dest="operation", metavar="{list,approve,retrieve}")
    sub.add_parser("list", help="List incoming requests awaiting your approval")
    approve = sub.add_parser("approve", help="Approve incoming requests from allowed users")
    approve.add_argument(
        "--allowed-users",
        help="The allowed users, separated by commas",
    )
    approve.add_argument("--reason", help="Confirmation reason")
    sub.add_parser("retrieve", help="Retrieve credentials of your approved requests")
    return parser


def _load_config(args: argparse.Namespace) -> PwvConfig:
    """設定ファイルを読み込み、コマンドライン引数で上書きする。"""
    path = args.config
    if path is None and os.environ.get(CONFIG_ENV):
        path = Path(os.environ[CONFIG_ENV])
    config = load(path)

    # 各セクションは validate_assignment=True のため、上書き値もここで検証される
    try:
        if args.url is not None:
            config.vault.base_url = args.url
        if args.insecure is not None:
            config.vault.insecure_skip_verify = args.insecure
        if args.timeout is not None:
            config.vault.timeout_seconds = args.timeout
        if args.log_level is not None:
            config.log.level = args.log_level
        if args.log_format is not None:
            config.log.format = args.log_format
        if args.allowed_users is not None:
            config.approve.allowed_users = args.allowed_users.split(",")
        if args.reason is not None:
            config.approve.reason = args.reason
    except ValidationError as e:
        raise ConfigError(
            code=PwvErrorCodes.VALIDATION,
            message=f"Invalid command line option: {e}",
            cause=e,
        ) from e
    return config


def _fmt_time(value: datetime | None) -> str:
    return value.isoformat() if value is not None else "-"


def list_incoming(vault: VaultClient) -> int:
    """受信リクエストを一覧表示する。"""
    try:
        response = vault.list_incoming_requests()
    except PwvError as e:
        print(f"Unable to list incoming requests: {e}", file=sys.stderr)
        return 1

    if not response.incoming_requests:
        print("There are no incoming requests.")
        return 0
    for r in response.incoming_requests:
        print(f"Incoming: {r.requestor_user_name}, '{r.account_name}' ('{r.user_reason}')")
    return 0


def approve(vault: VaultClient, allowed: frozenset[str], reason: str) -> int:
    try:
        results = approve_incoming(vault, allowed, reason)
    except PwvError as e:
        print(f"Unable to list incoming requests: {e}", file=sys.stderr)
        return 1

    if not results:
        print("There are no incoming requests.")
        return 0
    for result in results:
        r = result.request
        if result.outcome == ApprovalOutcome.IGNORED:
            print(
                f'Ignoring: {r.requestor_user_name}, "{r.user_reason}" '
                f"from {_fmt_time(r.access_from)} to {_fmt_time(r.access_to)}"
            )
            continue
        status = "ok!" if result.outcome == ApprovalOutcome.CONFIRMED else "failed!"
        print(
            f"Confirming: {r.requestor_user_name}, '{r.account_name}' "
            f"('{r.user_reason}')... {status}"
        )
        if result.error is not None:
            print(f"Unable to confirm request: {result.error}", file=sys.stderr)
    return 0


def retrieve(vault: VaultClient) -> int:
    try:
        response = vault.list_my_requests()
    except PwvError as e:
        print(f"Unable to list requests: {e}", file=sys.stderr)
        return 1

    if not response.my_requests:
        print("There are no requests.")
        return 0
    # 失敗した項目は retrieve_credentials が警告ログに出すので、標準出力には載せない
    for result in vault.retrieve_credentials(response.my_requests):
        if result.ok:
            print(f"{result.request.account_name} = {result.credential}")
    return 0


def _logout(vault: VaultClient) -> None:
    try:
        vault.logout()
    except PwvError as e:
        print(f"Unable to logout: {e}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """エントリーポイント。終了コードを返す。"""
    args = build_parser().parse_args(argv)
    operation = args.operation or "list"

    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1
    new_logger(level=config.log.level, format=config.log.format)

    if not args.username:
        print("No username given with --username", file=sys.stderr)
        return 1

    allowed = parse_allowed_users(config.approve.allowed_users)
    if operation == "approve" and not allowed:
        print("No allowed users specified using `--allowed-users'.", file=sys.stderr)
        return 1

    password = args.password
    if not password:
        try:
            password = getpass.getpass(f"{args.username}'s Password: ")
        except (EOFError, KeyboardInterrupt):
            print(file=sys.stderr)
            return 1

    vault = HttpVaultClient(config.vault.to_client_config())
    try:
        vault.login(args.username, password)
    except PwvError as e:
        print(f"Could not login: {e}", file=sys.stderr)
        return 1

    try:
        if operation == "approve":
            return approve(vault, allowed, config.approve.reason)
        if operation == "retrieve":
            return retrieve(vault)
        return list_incoming(vault)
    finally:
        _logout(vault)
