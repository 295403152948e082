"""Module Entry — `python -m layered_echo` exit statuses.

Tests:
    - Startup failure exits 1 with a critical log line, no traceback
    - Ctrl-C after uvicorn's graceful drain exits 130, no traceback
"""

import logging
import runpy

import pytest

import layered_echo
from layered_echo._internal.core.errors import ConstructionError


def _run_module():
    runpy.run_module("layered_echo", run_name="__main__", alter_sys=False)


def test_construction_error_exits_with_status_one(monkeypatch, caplog):
    def failing_main():
        raise ConstructionError("address in use", "listener")

    monkeypatch.setattr(layered_echo, "main", failing_main)
    with caplog.at_level(logging.CRITICAL), pytest.raises(SystemExit) as exc_info:
        _run_module()
    assert exc_info.value.code == 1
    assert "Startup aborted" in caplog.text


def test_interrupt_after_drain_exits_quietly(monkeypatch):
    def interrupted_main():
        raise KeyboardInterrupt

    monkeypatch.setattr(layered_echo, "main", interrupted_main)
    with pytest.raises(SystemExit) as exc_info:
        _run_module()
    assert exc_info.value.code == 130
