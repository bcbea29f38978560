"""Tests for audit change-set construction."""

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from uuid import UUID, uuid4

from budget_kernel.domain.audit_diff import (
    create_changes,
    delete_changes,
    record_to_audit_dict,
    to_audit_value,
    update_changes,
)
from budget_kernel.domain.dtos import AuditChange, PaymentMethod

NOW = datetime(2024, 1, 15, 12, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Record:
    id: UUID
    amount: int
    method: PaymentMethod | None
    day: date
    created_at: datetime
    updated_at: datetime | None = None


def _record(**kwargs) -> Record:
    fields = dict(
        id=UUID("00000000-0000-0000-0000-000000000001"),
        amount=1000,
        method=PaymentMethod.CASH,
        day=date(2024, 1, 10),
        created_at=NOW,
    )
    fields.update(kwargs)
    return Record(**fields)


class TestNormalization:
    def test_scalars(self):
        assert to_audit_value(PaymentMethod.UPI) == "upi"
        assert to_audit_value(date(2024, 1, 2)) == "2024-01-02"
        assert to_audit_value(NOW) == "2024-01-15T12:00:00+00:00"
        assert to_audit_value(None) is None
        assert to_audit_value(True) is True

    def test_uuid_becomes_string(self):
        uid = uuid4()
        assert to_audit_value(uid) == str(uid)

    def test_nested(self):
        uid = uuid4()
        assert to_audit_value({"ids": (uid,), "n": 1}) == {"ids": [str(uid)], "n": 1}

    def test_record_to_dict_accepts_mapping(self):
        assert record_to_audit_dict({"method": PaymentMethod.CASH}) == {"method": "cash"}


class TestCreateDelete:
    def test_create_lists_every_field(self):
        changes = create_changes(_record())
        assert [c.field for c in changes] == ["id", "amount", "method", "day", "created_at", "updated_at"]
        assert all(c.old_value is None for c in changes)
        assert AuditChange("amount", None, 1000) in changes

    def test_delete_mirrors_create(self):
        changes = delete_changes(_record())
        assert all(c.new_value is None for c in changes)
        assert AuditChange("method", "cash", None) in changes


class TestUpdate:
    def test_only_changed_fields(self):
        old = _record()
        new = replace(old, amount=1500, method=None)
        assert update_changes(old, new) == (
            AuditChange("amount", 1000, 1500),
            AuditChange("method", "cash", None),
        )

    def test_bookkeeping_fields_ignored(self):
        old = _record()
        new = replace(old, updated_at=NOW, created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
        assert update_changes(old, new) == ()

    def test_uuid_and_string_compare_equal(self):
        uid = uuid4()
        assert update_changes({"ref": uid}, {"ref": str(uid)}) == ()

    def test_new_only_fields_follow_old_fields(self):
        changes = update_changes({"a": 1}, {"a": 2, "b": 3})
        assert [c.field for c in changes] == ["a", "b"]
        assert changes[1] == AuditChange("b", None, 3)
