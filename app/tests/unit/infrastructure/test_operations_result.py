"""Unit tests for OperationResult and OperationStatus in infrastructure."""

import pytest
from infrastructure.operations import OperationResult, OperationStatus


@pytest.mark.unit
class TestOperationStatus:
    def test_operation_status_success(self):
        assert OperationStatus.SUCCESS.value == "success"

    def test_operation_status_transient_error(self):
        assert OperationStatus.TRANSIENT_ERROR.value == "transient_error"

    def test_operation_status_permanent_error(self):
        assert OperationStatus.PERMANENT_ERROR.value == "permanent_error"

    def test_operation_status_not_found(self):
        assert OperationStatus.NOT_FOUND.value == "not_found"

    def test_operation_status_conflict(self):
        assert OperationStatus.CONFLICT.value == "conflict"


@pytest.mark.unit
class TestOperationResultFactories:
    def test_success_factory_minimal(self):
        result = OperationResult.success()
        assert result.status == OperationStatus.SUCCESS
        assert result.is_success is True
        assert result.warnings == []

    def test_success_factory_with_data(self):
        data = {"added": [], "removed": []}
        result = OperationResult.success(data=data, message="applied")
        assert result.status == OperationStatus.SUCCESS
        assert result.data == data
        assert result.message == "applied"

    def test_success_factory_with_warnings(self):
        warnings = ["failed to publish event on events.members"]
        result = OperationResult.success(warnings=warnings)
        assert result.is_success is True
        assert result.warnings == warnings
        assert result.warnings is not warnings

    def test_error_factory_with_error_code(self):
        result = OperationResult.error(
            OperationStatus.PERMANENT_ERROR, "Invalid", error_code="VALIDATION_ERROR"
        )
        assert result.error_code == "VALIDATION_ERROR"
        assert result.is_success is False

    def test_transient_error_factory(self):
        result = OperationResult.transient_error("Timeout", error_code="STORE_FAILURE")
        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.message == "Timeout"

    def test_permanent_error_factory(self):
        result = OperationResult.permanent_error(
            "Invalid input", error_code="VALIDATION_ERROR"
        )
        assert result.status == OperationStatus.PERMANENT_ERROR

    def test_not_found_factory_default_code(self):
        result = OperationResult.not_found("group not found: g1")
        assert result.status == OperationStatus.NOT_FOUND
        assert result.error_code == "NOT_FOUND"

    def test_conflict_factory(self):
        result = OperationResult.conflict("cycle", error_code="cycle")
        assert result.status == OperationStatus.CONFLICT
        assert result.error_code == "cycle"


@pytest.mark.unit
class TestOperationResultEdgeCases:
    def test_operation_result_with_nested_data(self):
        data = {"membership": {"group_id": "g1", "direct": True}}
        result = OperationResult.success(data=data)
        assert result.data["membership"]["group_id"] == "g1"

    def test_operation_result_with_empty_data(self):
        result = OperationResult.success(data={})
        assert result.data == {}

    def test_error_results_have_no_warnings(self):
        assert OperationResult.conflict("dup").warnings == []
