"""
budget_config -- single public entrypoint for budget policy configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains a
    ``BudgetPolicy``.  It loads ``sets/<name>.yaml``, validates it and
    bridges it into the kernel's frozen policy type.

Architecture position:
    Configuration -- sits above ``budget_kernel``.  The kernel never
    imports from ``budget_config``; services receive the policy by
    constructor injection and fall back to ``DEFAULT_POLICY``.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with that name.
    - ``KeyError`` -- a required section or key is missing.
    - ``ValueError`` -- validation failed.

Audit relevance:
    Every successful call emits a ``BUDGET_CONFIG_TRACE`` log entry with
    the config id, version and checksum of the source YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

from budget_config.bridges import build_budget_policy
from budget_config.loader import load_configuration_set
from budget_config.validator import validate_configuration
from budget_kernel.domain.policy import BudgetPolicy

_logger = logging.getLogger("budget_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(name: str = "default", config_dir: Path | None = None) -> BudgetPolicy:
    """
    Load, validate and compile the named configuration set.

    Args:
        name: Configuration set name (file stem under the sets directory).
        config_dir: Override path to the configuration sets directory.
            Defaults to budget_config/sets/.

    Raises:
        FileNotFoundError: If ``<config_dir>/<name>.yaml`` does not exist.
        ValueError: If configuration validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Configuration set not found: {path}")

    config_set = load_configuration_set(path)

    validation = validate_configuration(config_set)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_validation_warning", extra={"warning": warning})

    policy = build_budget_policy(config_set)

    _logger.info(
        "BUDGET_CONFIG_TRACE",
        extra={
            "trace_type": "BUDGET_CONFIG_TRACE",
            "config_set_id": config_set.config_id,
            "config_set_version": config_set.version,
            "checksum": config_set.checksum,
            "warning_threshold_percent": policy.warning_threshold_percent,
            "critical_threshold_percent": policy.critical_threshold_percent,
        },
    )
    return policy


__all__ = ["get_active_config"]
