"""Tests for OData $filter synthesis."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from azuread_graph_core.query.filters import (
    FilterSpec,
    Predicate,
    build_filter,
    format_timestamp,
    page_size_for_limit,
    quote,
    to_lower_camel,
)

AUDIT_SPEC = FilterSpec(
    equality_fields=("activity_display_name", "category", "correlation_id", "result"),
    time_field="activity_date_time",
)

T = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


class TestHelpers:
    """Test naming, quoting and timestamp helpers."""

    @pytest.mark.unit
    def test_to_lower_camel(self):
        assert to_lower_camel("activity_display_name") == "activityDisplayName"
        assert to_lower_camel("category") == "category"
        assert to_lower_camel("app_id") == "appId"

    @pytest.mark.unit
    def test_quote_doubles_single_quotes(self):
        assert quote("O'Brien") == "'O''Brien'"

    @pytest.mark.unit
    def test_format_timestamp_utc(self):
        assert format_timestamp(T) == "2024-03-01T12:00:00Z"

    @pytest.mark.unit
    def test_format_timestamp_converts_offsets(self):
        plus_two = datetime(2024, 3, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(plus_two) == "2024-03-01T12:00:00Z"

    @pytest.mark.unit
    def test_format_timestamp_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 3, 1, 12, 0, 0)) == "2024-03-01T12:00:00Z"


class TestEqualityClauses:
    """Test equality predicates."""

    @pytest.mark.unit
    def test_single_equality(self):
        result = build_filter([Predicate("activity_display_name", "=", "Add user")], AUDIT_SPEC)

        assert result == "activityDisplayName eq 'Add user'"

    @pytest.mark.unit
    def test_quotes_are_escaped(self):
        result = build_filter([Predicate("category", "=", "It's")], AUDIT_SPEC)

        assert result == "category eq 'It''s'"

    @pytest.mark.unit
    def test_range_operator_on_equality_field_raises(self):
        with pytest.raises(ValueError):
            build_filter([Predicate("category", ">", "a")], AUDIT_SPEC)

    @pytest.mark.unit
    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError):
            build_filter([Predicate("category", "<>", "a")], AUDIT_SPEC)

    @pytest.mark.unit
    def test_undeclared_fields_are_skipped(self):
        result = build_filter([Predicate("logged_by_service", "=", "Core Directory")], AUDIT_SPEC)

        assert result is None


class TestTimestampClauses:
    """Test range predicates on the timestamp column."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("operator", "expected"),
        [
            (">=", "activityDateTime ge 2024-03-01T12:00:00Z"),
            ("<=", "activityDateTime le 2024-03-01T12:00:00Z"),
            ("=", "activityDateTime eq 2024-03-01T12:00:00Z"),
            (">", "activityDateTime ge 2024-03-01T12:00:01Z"),
            ("<", "activityDateTime le 2024-03-01T11:59:59Z"),
        ],
    )
    def test_operator_translation(self, operator, expected):
        assert build_filter([Predicate("activity_date_time", operator, T)], AUDIT_SPEC) == expected

    @pytest.mark.unit
    def test_strict_greater_than_shifts_across_midnight(self):
        midnight = datetime(2023, 12, 31, 23, 59, 59, tzinfo=UTC)

        result = build_filter([Predicate("activity_date_time", ">", midnight)], AUDIT_SPEC)

        assert result == "activityDateTime ge 2024-01-01T00:00:00Z"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("operator", "expected"),
        [
            ("<=", "activityDateTime le 2024-03-01T10:00:00.5Z"),
            ("=", "activityDateTime eq 2024-03-01T10:00:00.5Z"),
            (">", "activityDateTime ge 2024-03-01T10:00:01.5Z"),
            ("<", "activityDateTime le 2024-03-01T09:59:59.5Z"),
        ],
    )
    def test_fractional_seconds_are_kept(self, operator, expected):
        value = datetime(2024, 3, 1, 10, 0, 0, 500000, tzinfo=UTC)

        assert build_filter([Predicate("activity_date_time", operator, value)], AUDIT_SPEC) == expected

    @pytest.mark.unit
    def test_format_timestamp_microseconds(self):
        assert format_timestamp(datetime(2024, 3, 1, 10, 0, 0, 123456, tzinfo=UTC)) == "2024-03-01T10:00:00.123456Z"

    @pytest.mark.unit
    def test_iso_string_values(self):
        result = build_filter([Predicate("activity_date_time", "<", "2024-03-01T12:00:00Z")], AUDIT_SPEC)

        assert result == "activityDateTime le 2024-03-01T11:59:59Z"

    @pytest.mark.unit
    def test_invalid_timestamp_raises(self):
        with pytest.raises(ValueError):
            build_filter([Predicate("activity_date_time", ">", "yesterday")], AUDIT_SPEC)

    @pytest.mark.unit
    def test_time_range(self):
        result = build_filter(
            [
                Predicate("activity_date_time", "<", T + timedelta(days=1)),
                Predicate("activity_date_time", ">", T),
            ],
            AUDIT_SPEC,
        )

        assert result == "activityDateTime ge 2024-03-01T12:00:01Z and activityDateTime le 2024-03-02T11:59:59Z"


class TestCombination:
    """Test joining, ordering and overrides."""

    @pytest.mark.unit
    def test_fixed_field_order_not_input_order(self):
        forward = [
            Predicate("result", "=", "success"),
            Predicate("activity_date_time", ">=", T),
            Predicate("category", "=", "UserManagement"),
        ]

        result = build_filter(forward, AUDIT_SPEC)

        assert result == (
            "category eq 'UserManagement' and result eq 'success' and activityDateTime ge 2024-03-01T12:00:00Z"
        )
        assert build_filter(list(reversed(forward)), AUDIT_SPEC) == result

    @pytest.mark.unit
    def test_deterministic(self):
        predicates = [
            Predicate("correlation_id", "=", "c1"),
            Predicate("activity_date_time", "<=", T),
            Predicate("activity_display_name", "=", "Add user"),
        ]

        assert build_filter(predicates, AUDIT_SPEC) == build_filter(predicates, AUDIT_SPEC)

    @pytest.mark.unit
    def test_raw_filter_overrides_predicates(self):
        raw = "startswith(activityDisplayName, 'Add')"

        result = build_filter([Predicate("category", "=", "Policy")], AUDIT_SPEC, raw_filter=raw)

        assert result == raw

    @pytest.mark.unit
    def test_empty_raw_filter_does_not_override(self):
        result = build_filter([Predicate("category", "=", "Policy")], AUDIT_SPEC, raw_filter="")

        assert result == "category eq 'Policy'"

    @pytest.mark.unit
    def test_no_predicates(self):
        assert build_filter([], AUDIT_SPEC) is None

    @pytest.mark.unit
    def test_accepts_generators(self):
        result = build_filter((p for p in [Predicate("result", "=", "failure")]), AUDIT_SPEC)

        assert result == "result eq 'failure'"


class TestPageSizeForLimit:
    """Test $top selection."""

    @pytest.mark.unit
    def test_limit_within_range(self):
        assert page_size_for_limit(50, 999) == 50

    @pytest.mark.unit
    def test_limit_at_maximum(self):
        assert page_size_for_limit(999, 999) == 999

    @pytest.mark.unit
    def test_limit_above_maximum(self):
        assert page_size_for_limit(5000, 999) == 999

    @pytest.mark.unit
    def test_no_limit(self):
        assert page_size_for_limit(None, 1000) == 1000

    @pytest.mark.unit
    def test_zero_limit(self):
        assert page_size_for_limit(0, 1000) == 1000

    @pytest.mark.unit
    def test_no_maximum(self):
        assert page_size_for_limit(10, None) is None
