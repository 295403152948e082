"""Domain Types — verifies value types and enum values.

Tests:
    - EchoRequest / EchoResult are frozen
    - ShutdownReport.clean reflects abandoned count
    - Enums serialize to their string values
"""

from dataclasses import FrozenInstanceError

import pytest

from layered_echo._internal.core.domain_types import (
    EchoRequest, EchoResult, HostingMode, ShutdownReport, StoreBackend,
)
from layered_echo._internal.core.errors import ShutdownTimeoutError


def test_echo_request_is_frozen():
    req = EchoRequest(message="hi")
    with pytest.raises(FrozenInstanceError):
        req.message = "changed"


def test_echo_result_is_frozen():
    res = EchoResult(message="hi", length=2)
    with pytest.raises(FrozenInstanceError):
        res.length = 3


def test_default_shutdown_report_is_clean():
    report = ShutdownReport()
    assert report.clean
    assert report.abandoned == 0
    assert report.error is None


def test_shutdown_report_with_abandoned_is_not_clean():
    report = ShutdownReport(abandoned=2, error=ShutdownTimeoutError(2, 1.0))
    assert not report.clean


def test_hosting_mode_has_two_modes():
    assert {m.value for m in HostingMode} == {"standalone", "embedded"}


def test_store_backend_values():
    assert StoreBackend("memory") is StoreBackend.MEMORY
    assert StoreBackend("sql") is StoreBackend.SQL
