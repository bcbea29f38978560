"""
Audit diff -- field-level change sets for create/update/delete entries.

Responsibility:
    Normalizes a record (frozen dataclass or mapping) into JSON-safe values
    and builds the ``AuditChange`` tuples stored on an audit entry.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Consumed by
    ``AuditService``.

Invariants enforced:
    - Create: every field, ``old_value=None``.
    - Delete: every field, ``new_value=None``.
    - Update: only fields whose normalized values differ, never a
      bookkeeping field (``created_at``, ``updated_at``, ``created_by``,
      ``updated_by``).
    - Values compare structurally after normalization: ``UUID`` and its
      string form are the same value, as are an enum member and its value.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from budget_kernel.domain.dtos import AuditChange

BOOKKEEPING_FIELDS: frozenset[str] = frozenset(
    {"created_at", "updated_at", "created_by", "updated_by"}
)


def to_audit_value(value: Any) -> Any:
    """Convert ``value`` into the JSON-safe form stored in ``changes``."""
    # str-valued enums are also str; unwrap them first.
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_audit_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_audit_value(v) for v in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return record_to_audit_dict(value)
    return str(value)


def record_to_audit_dict(record: Any) -> dict[str, Any]:
    """Flatten a dataclass instance or mapping into ``{field: json_value}``."""
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return {
            f.name: to_audit_value(getattr(record, f.name))
            for f in dataclasses.fields(record)
        }
    if isinstance(record, Mapping):
        return {str(k): to_audit_value(v) for k, v in record.items()}
    raise TypeError(f"Cannot audit value of type {type(record).__name__}")


def create_changes(record: Any) -> tuple[AuditChange, ...]:
    return tuple(
        AuditChange(field=name, old_value=None, new_value=value)
        for name, value in record_to_audit_dict(record).items()
    )


def delete_changes(record: Any) -> tuple[AuditChange, ...]:
    return tuple(
        AuditChange(field=name, old_value=value, new_value=None)
        for name, value in record_to_audit_dict(record).items()
    )


def update_changes(old_record: Any, new_record: Any) -> tuple[AuditChange, ...]:
    """
    Changes between two snapshots of the same record.

    Field order follows ``old_record``, then fields only present in
    ``new_record``.  An update that touches only bookkeeping fields yields
    an empty tuple.
    """
    old = record_to_audit_dict(old_record)
    new = record_to_audit_dict(new_record)

    names = list(old)
    names.extend(name for name in new if name not in old)

    changes = []
    for name in names:
        if name in BOOKKEEPING_FIELDS:
            continue
        old_value = old.get(name)
        new_value = new.get(name)
        if old_value != new_value:
            changes.append(AuditChange(field=name, old_value=old_value, new_value=new_value))
    return tuple(changes)
