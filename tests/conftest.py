from __future__ import annotations

import pytest

from httpreader.config import config
from httpreader.message import ResponseMessage


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Pin config values that a developer's environment could override."""
    monkeypatch.setattr(config, "halt_on_failure", True)
    monkeypatch.setattr(config, "strip_consumed_encoding", False)
    monkeypatch.setattr(config, "default_charset", "utf-8")


@pytest.fixture
def html_message() -> ResponseMessage:
    return ResponseMessage.make(
        status_code=200,
        reason="OK",
        content=b"<html><body>hi</body></html>",
        headers={"Server": "test", "Content-Type": "text/html; charset=utf-8"},
    )


@pytest.fixture
def json_message() -> ResponseMessage:
    return ResponseMessage.make(
        status_code=201,
        reason="Created",
        content=b'{"a": 1, "b": [1, 2]}',
        headers={"Content-Type": "application/json"},
    )
