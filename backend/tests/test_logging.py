import json
import logging

import pytest

from channel_access.core.logging import (
    StructuredLogger,
    get_logger,
    log_operation,
    request_id_var,
    set_request_id,
)
from channel_access.permissions.exceptions import Conflict


@pytest.fixture(autouse=True)
def reset_request_id():
    token = request_id_var.set(None)
    yield
    request_id_var.reset(token)


def test_human_readable_format(caplog, monkeypatch):
    log = get_logger("channel-access.test")
    monkeypatch.setattr(log, "_is_json", False)
    set_request_id("abc12345")

    with caplog.at_level(logging.INFO):
        log.info("member added", user_id=7)

    message = caplog.records[-1].getMessage()
    assert message.startswith("[abc12345]")
    assert "member added" in message
    assert "'user_id': 7" in message


def test_json_format(caplog, monkeypatch):
    log = StructuredLogger("channel-access.test")
    monkeypatch.setattr(log, "_is_json", True)

    with caplog.at_level(logging.ERROR):
        log.error("store failure", error=RuntimeError("boom"), channel_id=3)

    record = json.loads(caplog.records[-1].getMessage())
    assert record["level"] == "ERROR"
    assert record["context"] == {"channel_id": 3}
    assert record["error"] == {"type": "RuntimeError", "message": "boom"}
    assert "request_id" not in record


def test_missing_request_id_renders_placeholder(caplog, monkeypatch):
    log = get_logger("channel-access.test")
    monkeypatch.setattr(log, "_is_json", False)

    with caplog.at_level(logging.WARNING):
        log.warning("invalid role")

    assert caplog.records[-1].getMessage().startswith("[-] ")


def test_log_operation_requires_coroutine():
    with pytest.raises(TypeError):
        log_operation("sync")(lambda: None)


@pytest.mark.anyio
async def test_log_operation_outcomes(caplog):
    log = get_logger("channel-access.test.ops")

    @log_operation("ok_op", log)
    async def ok_op():
        return 5

    @log_operation("conflict_op", log)
    async def conflict_op():
        raise Conflict("dup")

    @log_operation("broken_op", log)
    async def broken_op():
        raise RuntimeError("db down")

    with caplog.at_level(logging.INFO):
        assert await ok_op() == 5
        with pytest.raises(Conflict):
            await conflict_op()
        with pytest.raises(RuntimeError):
            await broken_op()

    by_message = {r.getMessage().split(" | ")[0].split("] ")[-1]: r.levelno for r in caplog.records}
    assert by_message["ok_op completed"] == logging.INFO
    assert by_message["conflict_op rejected"] == logging.INFO
    assert by_message["broken_op failed"] == logging.ERROR
