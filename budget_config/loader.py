"""
Configuration Loader (``budget_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen
``budget_config.schema`` dataclasses.  Runtime callers go through
``budget_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required section or key  -> ``KeyError`` propagates.
* Non-integer limit or threshold  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from budget_config.schema import (
    AlertConfig,
    BudgetConfigurationSet,
    LimitsConfig,
    PlaceholderCategoryConfig,
    ReportingConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _int(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def parse_alerts(data: dict[str, Any]) -> AlertConfig:
    return AlertConfig(
        warning_threshold_percent=_int(data, "warning_threshold_percent"),
        critical_threshold_percent=_int(data, "critical_threshold_percent"),
        percentage_display_cap=_int(data, "percentage_display_cap"),
    )


def parse_limits(data: dict[str, Any]) -> LimitsConfig:
    return LimitsConfig(
        max_amount_cents=_int(data, "max_amount_cents"),
        description_max_length=_int(data, "description_max_length"),
        notes_max_length=_int(data, "notes_max_length"),
        reference_id_max_length=_int(data, "reference_id_max_length"),
        user_name_max_length=_int(data, "user_name_max_length"),
        category_name_max_length=_int(data, "category_name_max_length"),
    )


def parse_placeholder(data: dict[str, Any]) -> PlaceholderCategoryConfig:
    return PlaceholderCategoryConfig(
        name=str(data["name"]),
        color=str(data["color"]),
        icon=str(data["icon"]),
    )


def parse_reporting(data: dict[str, Any]) -> ReportingConfig:
    return ReportingConfig(
        recent_activity_limit=_int(data, "recent_activity_limit"),
        recent_expenses_limit=_int(data, "recent_expenses_limit"),
    )


def parse_configuration_set(data: dict[str, Any]) -> BudgetConfigurationSet:
    """Parse a whole configuration set; the checksum covers the raw dict."""
    return BudgetConfigurationSet(
        config_id=str(data["config_id"]),
        version=_int(data, "version"),
        description=str(data.get("description", "")),
        alerts=parse_alerts(data["alerts"]),
        limits=parse_limits(data["limits"]),
        placeholder_category=parse_placeholder(data["placeholder_category"]),
        reporting=parse_reporting(data["reporting"]),
        checksum=compute_checksum(data),
    )


def load_configuration_set(path: Path) -> BudgetConfigurationSet:
    return parse_configuration_set(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
