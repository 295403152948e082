"""Error Hierarchy — verifies codes, categories and the stable response envelope.

Tests:
    - to_response() has exactly code/message/category/severity (no timestamp, no status)
    - Domain errors never carry a transport status
    - Each concrete error has its documented code and category
"""

import pytest

from layered_echo._internal.core.errors import (
    ConstructionError, DomainError, EchoServiceError, ErrorCategory, ErrorSeverity,
    IllegalTransitionError, InvalidInputError, ResourceNotFoundError,
    ShutdownTimeoutError, StoreUnavailableError, TransportError,
)


def test_response_envelope_has_stable_keys():
    err = InvalidInputError("bad", "message")
    assert err.to_response() == {
        "error": {
            "code": "INVALID_INPUT",
            "message": "bad",
            "category": "validation",
            "severity": "error",
        },
    }


def test_envelope_is_identical_for_identical_errors():
    a = StoreUnavailableError("boom", "put").to_response()
    b = StoreUnavailableError("boom", "put").to_response()
    assert a == b


@pytest.mark.parametrize("err", [
    InvalidInputError("bad", "message"),
    ResourceNotFoundError("Entry", "k"),
    StoreUnavailableError("down", "get"),
])
def test_domain_errors_carry_no_transport_status(err):
    assert isinstance(err, DomainError)
    assert not hasattr(err, "http_status")
    assert not hasattr(err, "status_code")


def test_invalid_input_records_field():
    err = InvalidInputError("too long", "message")
    assert err.field == "message"
    assert err.category is ErrorCategory.VALIDATION


def test_resource_not_found_message_names_resource():
    err = ResourceNotFoundError("Entry", "abc")
    assert err.message == "Entry 'abc' not found"
    assert err.code == "RESOURCE_NOT_FOUND"


def test_store_unavailable_is_critical_data_access():
    err = StoreUnavailableError("closed", "put")
    assert err.category is ErrorCategory.DATA_ACCESS
    assert err.severity is ErrorSeverity.CRITICAL
    assert err.operation == "put"
    assert "put" in err.message


def test_construction_error_names_component():
    err = ConstructionError("refused", "data access")
    assert err.component == "data access"
    assert err.context.component == "data access"
    assert err.message == "Failed to construct data access: refused"
    assert not isinstance(err, DomainError)


def test_transport_error_is_not_a_domain_error():
    err = TransportError("reset by peer")
    assert err.category is ErrorCategory.TRANSPORT
    assert not isinstance(err, DomainError)


def test_shutdown_timeout_reports_abandoned_count():
    err = ShutdownTimeoutError(3, 0.5)
    assert err.abandoned == 3
    assert err.deadline_seconds == 0.5
    assert err.severity is ErrorSeverity.WARNING
    assert "3 request(s)" in err.message


def test_all_service_errors_share_base():
    for cls in (
        ConstructionError, DomainError, TransportError, ShutdownTimeoutError,
    ):
        assert issubclass(cls, EchoServiceError)


def test_illegal_transition_is_a_programming_error():
    assert issubclass(IllegalTransitionError, RuntimeError)
    assert not issubclass(IllegalTransitionError, EchoServiceError)
