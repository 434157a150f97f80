"""Tests for command option helpers."""

from __future__ import annotations

from datetime import date, datetime
from unittest.mock import patch

import pytest

from taskhub_cli.models import (
    AppConfig,
    ConfigurationError,
    Frequency,
    RecurrenceValidationError,
)
from taskhub_cli.models.config_models import UIConfig
from taskhub_cli.utils.exit_codes import ERROR_INVALID_ARGS, exit_code_for
from taskhub_cli.utils.task_helpers import (
    build_rule,
    local_today,
    parse_datetime_option,
    parse_days,
)


class TestParseDays:
    def test_names_and_numbers(self):
        assert parse_days("mon, 3,Fri") == [1, 3, 5]

    def test_unknown_name(self):
        with pytest.raises(RecurrenceValidationError):
            parse_days("funday")


class TestBuildRule:
    def test_no_options_means_no_rule(self):
        assert build_rule() == (None, None)

    def test_structured_weekly(self):
        rule, start = build_rule(freq="Weekly", every=2, on="fri,mon")
        assert rule.frequency is Frequency.WEEKLY
        assert rule.interval == 2
        assert rule.days_of_week == (1, 5)
        assert start is None

    def test_phrase_with_until(self):
        rule, start = build_rule(
            repeat="every day", until="2024-07-01", today=date(2024, 6, 5)
        )
        assert rule.end_date == date(2024, 7, 1)
        assert start == date(2024, 6, 5)

    def test_until_alone_is_rejected(self):
        with pytest.raises(RecurrenceValidationError):
            build_rule(until="2024-07-01")

    def test_freq_is_required_with_structured_options(self):
        with pytest.raises(RecurrenceValidationError):
            build_rule(every=3)

    def test_bad_until_date(self):
        with pytest.raises(RecurrenceValidationError):
            build_rule(freq="daily", until="someday")


class TestParseDatetimeOption:
    # Wednesday midnight
    BASE = datetime(2024, 6, 5)

    def test_iso_timestamp(self):
        parsed = parse_datetime_option("2024-06-03T09:00", "--due")
        assert parsed == datetime(2024, 6, 3, 9, 0)

    def test_relative_phrase_is_anchored_to_midnight(self):
        parsed = parse_datetime_option("tomorrow", "--due", self.BASE)
        assert parsed == datetime(2024, 6, 6)

    def test_in_n_days(self):
        parsed = parse_datetime_option("in 2 days", "--due", self.BASE)
        assert parsed == datetime(2024, 6, 7)

    def test_hours_ago_uses_the_given_base(self):
        parsed = parse_datetime_option("2 hours ago", "--at", datetime(2024, 6, 5, 15, 0))
        assert parsed == datetime(2024, 6, 5, 13, 0)

    def test_unrecognized_value(self):
        with pytest.raises(RecurrenceValidationError, match="--due"):
            parse_datetime_option("zzzz", "--due", self.BASE)


class TestLocalToday:
    def test_unknown_timezone_is_a_configuration_error(self, mock_config_service):
        bad_ui = UIConfig.model_construct(timezone="Mars/Olympus")
        mock_config_service.config = AppConfig(ui=bad_ui)

        with patch(
            "taskhub_cli.utils.task_helpers.get_config_service",
            return_value=mock_config_service,
        ):
            with pytest.raises(ConfigurationError) as exc_info:
                local_today()

        assert exit_code_for(exc_info.value) == ERROR_INVALID_ARGS
