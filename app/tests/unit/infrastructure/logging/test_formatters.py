"""Unit tests for the structlog processors in infrastructure.logging.formatters."""

import pytest

from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)


def _run(processor, **event_dict):
    return processor(None, "info", event_dict)


@pytest.mark.unit
class TestAddAppInfo:
    def test_stamps_name_and_version(self):
        result = _run(
            add_app_info("group-hierarchy", "abc123"),
            event="hierarchy_edge_inserted",
            parent_group_id="eng",
        )

        assert result == {
            "event": "hierarchy_edge_inserted",
            "parent_group_id": "eng",
            "app_name": "group-hierarchy",
            "app_version": "abc123",
        }

    def test_version_defaults_to_unknown(self):
        result = _run(add_app_info("group-hierarchy"), event="startup")

        assert result["app_version"] == "unknown"


@pytest.mark.unit
class TestMaskSensitiveData:
    def test_hierarchy_fields_pass_through(self):
        fields = {
            "event": "applying_hierarchy_change",
            "actor_id": "user-1",
            "audit_id": "audit-9",
            "parent_group_id": "eng",
            "member_group_id": "platform",
        }

        assert _run(mask_sensitive_data(), **fields) == fields

    @pytest.mark.parametrize(
        "key", ["password", "DB_PASSWORD", "broker_token", "Authorization", "api_key"]
    )
    def test_sensitive_keys_are_masked(self, key):
        result = _run(mask_sensitive_data(), **{key: "hunter2"})

        assert result[key] == "***REDACTED***"

    def test_none_values_are_kept(self):
        result = _run(mask_sensitive_data(), token=None)

        assert result["token"] is None

    def test_custom_mask_and_extra_patterns(self):
        processor = mask_sensitive_data(mask_value="[hidden]", additional_patterns={"email"})

        result = _run(processor, user_email="a@example.com", group_id="g1")

        assert result == {"user_email": "[hidden]", "group_id": "g1"}

    def test_default_patterns_are_immutable(self):
        assert isinstance(SENSITIVE_PATTERNS, frozenset)
        assert "secret" in SENSITIVE_PATTERNS


@pytest.mark.unit
class TestTruncateLargeValues:
    def test_long_strings_are_cut_with_original_length(self):
        result = _run(truncate_large_values(max_length=10), memberships="x" * 25)

        assert result["memberships"] == "x" * 10 + "...[truncated, 25 chars total]"

    def test_short_strings_and_non_strings_are_kept(self):
        added = [("user-u", "eng")] * 1000
        result = _run(truncate_large_values(max_length=10), event="short", added=added)

        assert result["event"] == "short"
        assert result["added"] is added

    def test_default_limit(self):
        result = _run(truncate_large_values(), value="y" * 500)

        assert result["value"] == "y" * 500
