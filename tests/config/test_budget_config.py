"""Tests for loading, validating and bridging budget configuration sets.

Covers get_active_config() against the shipped default set and against
temporary sets written to tmp_path, plus the validator's cross-field rules.
"""

from __future__ import annotations

import copy
from pathlib import Path

import pytest
import yaml

from budget_config import get_active_config
from budget_config.bridges import build_budget_policy
from budget_config.loader import compute_checksum, load_yaml_file, parse_configuration_set
from budget_config.validator import validate_configuration
from budget_kernel.domain.dtos import AlertLevel
from budget_kernel.domain.policy import DEFAULT_POLICY, BudgetPolicy
from budget_kernel.services.tracker import BudgetTracker

DEFAULT_SET = Path(__file__).resolve().parents[2] / "budget_config" / "sets" / "default.yaml"


@pytest.fixture
def raw_default() -> dict:
    return load_yaml_file(DEFAULT_SET)


def _write_set(directory: Path, name: str, data: dict) -> Path:
    path = directory / f"{name}.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaultSet:
    def test_default_matches_kernel_defaults(self):
        assert get_active_config() == DEFAULT_POLICY

    def test_trace_logged(self, captured_logs):
        get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "BUDGET_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_set_id"] == "default"
        assert len(traces[0]["checksum"]) == 64

    def test_missing_set(self):
        with pytest.raises(FileNotFoundError):
            get_active_config("does-not-exist")


class TestCustomSets:
    def test_thresholds_flow_into_policy(self, tmp_path, raw_default):
        data = copy.deepcopy(raw_default)
        data["config_id"] = "strict"
        data["alerts"]["warning_threshold_percent"] = 50
        data["alerts"]["critical_threshold_percent"] = 90
        _write_set(tmp_path, "strict", data)

        policy = get_active_config("strict", config_dir=tmp_path)

        assert isinstance(policy, BudgetPolicy)
        assert (policy.warning_threshold_percent, policy.critical_threshold_percent) == (50, 90)

    def test_configured_tracker_uses_thresholds(
        self,
        tmp_path,
        raw_default,
        storage,
        clock,
        member_ctx,
        food,
        make_budget_input,
        make_expense_input,
    ):
        data = copy.deepcopy(raw_default)
        data["alerts"]["warning_threshold_percent"] = 50
        _write_set(tmp_path, "early", data)
        policy = get_active_config("early", config_dir=tmp_path)
        tracker = BudgetTracker(storage, clock=clock, policy=policy)

        tracker.budgets.create_budget(make_budget_input(food.id, amount=10000), member_ctx)
        tracker.expenses.create_expense(make_expense_input(food.id, amount=6000), member_ctx)

        [status] = tracker.budgets.get_budget_statuses(None, member_ctx)
        assert status.alert_level is AlertLevel.WARNING

    def test_invalid_set_rejected(self, tmp_path, raw_default):
        data = copy.deepcopy(raw_default)
        data["alerts"]["warning_threshold_percent"] = 100
        _write_set(tmp_path, "broken", data)

        with pytest.raises(ValueError, match="warning_threshold_percent"):
            get_active_config("broken", config_dir=tmp_path)

    def test_warning_logged_not_raised(self, tmp_path, raw_default, captured_logs):
        data = copy.deepcopy(raw_default)
        data["reporting"]["recent_activity_limit"] = 5000
        _write_set(tmp_path, "chatty", data)

        policy = get_active_config("chatty", config_dir=tmp_path)

        assert policy.recent_activity_limit == 5000
        assert any(r["message"] == "config_validation_warning" for r in captured_logs())

    def test_missing_section(self, tmp_path, raw_default):
        data = copy.deepcopy(raw_default)
        del data["limits"]
        _write_set(tmp_path, "partial", data)

        with pytest.raises(KeyError):
            get_active_config("partial", config_dir=tmp_path)

    def test_non_integer_limit(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["limits"]["max_amount_cents"] = "lots"
        with pytest.raises(ValueError):
            parse_configuration_set(data)

    def test_bool_is_not_an_integer(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["version"] = True
        with pytest.raises(ValueError):
            parse_configuration_set(data)


class TestValidator:
    def _validate(self, data: dict):
        return validate_configuration(parse_configuration_set(data))

    def test_default_is_clean(self, raw_default):
        result = self._validate(raw_default)
        assert result.is_valid
        assert result.warnings == []

    def test_display_cap_below_critical(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["alerts"]["percentage_display_cap"] = 90
        result = self._validate(data)
        assert any("percentage_display_cap" in e for e in result.errors)

    def test_non_positive_limits(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["limits"]["notes_max_length"] = 0
        data["reporting"]["recent_expenses_limit"] = -1
        result = self._validate(data)
        assert not result.is_valid
        assert len(result.errors) == 2

    def test_placeholder_color(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["placeholder_category"]["color"] = "grey"
        result = self._validate(data)
        assert any("placeholder_category.color" in e for e in result.errors)


class TestChecksum:
    def test_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_changes_with_content(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["version"] = 2
        assert compute_checksum(data) != compute_checksum(raw_default)

    def test_recorded_on_parse(self, raw_default):
        config = parse_configuration_set(raw_default)
        assert config.checksum == compute_checksum(raw_default)

    def test_bridge_copies_placeholder(self, raw_default):
        data = copy.deepcopy(raw_default)
        data["placeholder_category"]["name"] = "Uncategorised"
        policy = build_budget_policy(parse_configuration_set(data))
        assert policy.unknown_category_name == "Uncategorised"
