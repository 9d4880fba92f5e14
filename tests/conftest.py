"""pwv テスト共通設定。"""

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """new_logger が差し込んだ stderr ハンドラーをテストごとに外す。"""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


@pytest.fixture
def incoming_response() -> dict[str, Any]:
    """受信リクエスト一覧のフィクスチャ（fixtures/response.json）。"""
    data: dict[str, Any] = json.loads((FIXTURES / "response.json").read_text(encoding="utf-8"))
    return data
