"""
Hypothesis property tests for the budget core.

Properties:
- spent + remaining == amount for every budget and expense set
- zero-amount budgets never alert and report 0%
- alerts follow exact integer thresholds and their toggles
- rollover rules never exceed the remaining amount, and SURPLUS is never negative
- summary buckets always add up to the number of statuses
- permission filtering is an identity for privileged roles and an
  ownership filter for role ``user``
- update diffs never mention bookkeeping fields
"""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from hypothesis import given, settings
from hypothesis import strategies as st

from budget_kernel.domain.audit_diff import BOOKKEEPING_FIELDS, update_changes
from budget_kernel.domain.budget_calculator import BudgetCalculator
from budget_kernel.domain.dtos import (
    ActorContext,
    AlertLevel,
    BudgetInfo,
    BudgetPeriod,
    CategoryInfo,
    ExpenseInfo,
    RolloverRule,
    UserRole,
)
from budget_kernel.domain.permissions import PermissionChecker
from budget_kernel.domain.rollover import RolloverManager

NOW = datetime(2024, 1, 15, tzinfo=timezone.utc)
OWNER = uuid4()
OTHER = uuid4()
FOOD = uuid4()
WINDOW_START = date(2024, 1, 1)
WINDOW_END = date(2024, 1, 31)

CATEGORY = CategoryInfo(
    id=FOOD,
    name="Food",
    description="",
    color="#ff0000",
    icon="utensils",
    is_default=True,
    is_active=True,
    created_by=None,
    created_at=NOW,
)

calculator = BudgetCalculator()
checker = PermissionChecker()


def _budget(amount, alert_at_80=True, alert_at_100=True, rule=RolloverRule.NO_ROLLOVER):
    return BudgetInfo(
        id=uuid4(),
        user_id=OWNER,
        category_id=FOOD,
        period=BudgetPeriod.MONTHLY,
        amount=amount,
        rollover_rule=rule,
        start_date=WINDOW_START,
        end_date=WINDOW_END,
        alert_at_80=alert_at_80,
        alert_at_100=alert_at_100,
        is_active=True,
        created_at=NOW,
    )


def _expense(amount, day, user_id=OWNER):
    return ExpenseInfo(
        id=uuid4(),
        user_id=user_id,
        category_id=FOOD,
        amount=amount,
        date=day,
        description="x",
        payment_method=None,
        notes=None,
        reference_id=None,
        created_by=user_id,
        created_at=NOW,
    )


amounts = st.integers(min_value=1, max_value=99_999_999)
days = st.dates(min_value=date(2023, 12, 1), max_value=date(2024, 2, 29))
expense_lists = st.lists(
    st.builds(
        _expense,
        st.integers(min_value=1, max_value=10_000_000),
        days,
        st.sampled_from([OWNER, OTHER]),
    ),
    max_size=30,
)


class TestStatusProperties:
    @given(amount=amounts, expenses=expense_lists)
    @settings(max_examples=200)
    def test_spent_plus_remaining_is_amount(self, amount, expenses):
        status = calculator.calculate_budget_status(_budget(amount), expenses, CATEGORY)
        assert status.spent + status.remaining == amount
        assert status.spent == sum(
            e.amount
            for e in expenses
            if e.user_id == OWNER and WINDOW_START <= e.date <= WINDOW_END
        )

    @given(expenses=expense_lists)
    def test_zero_amount_never_alerts(self, expenses):
        status = calculator.calculate_budget_status(_budget(0), expenses, CATEGORY)
        assert status.percentage_used == 0
        assert status.alert_level is AlertLevel.NONE

    @given(amount=amounts, spent=st.integers(min_value=0, max_value=10**9))
    def test_alert_matches_integer_thresholds(self, amount, spent):
        level = calculator.alert_level(_budget(amount), spent)
        if spent * 100 >= 100 * amount:
            assert level is AlertLevel.CRITICAL
        elif spent * 100 >= 80 * amount:
            assert level is AlertLevel.WARNING
        else:
            assert level is AlertLevel.NONE

    @given(amount=amounts, spent=st.integers(min_value=0, max_value=10**9))
    def test_toggles_off_never_alert(self, amount, spent):
        budget = _budget(amount, alert_at_80=False, alert_at_100=False)
        assert calculator.alert_level(budget, spent) is AlertLevel.NONE

    @given(amount=amounts, spent=st.integers(min_value=0, max_value=10**12))
    def test_percentage_is_capped(self, amount, spent):
        status = calculator.calculate_budget_status(
            _budget(amount), [_expense(spent, date(2024, 1, 10))] if spent else [], CATEGORY
        )
        assert 0 <= status.percentage_used <= 999

    @given(amounts_=st.lists(st.integers(min_value=0, max_value=20_000), max_size=25))
    def test_summary_counts_add_up(self, amounts_):
        statuses = [
            calculator.calculate_budget_status(
                _budget(10_000), [_expense(a, date(2024, 1, 5))] if a else [], CATEGORY
            )
            for a in amounts_
        ]
        assert calculator.get_budget_summary(statuses).total == len(statuses)


class TestRolloverProperties:
    @given(remaining=st.integers(min_value=-10**8, max_value=10**8))
    def test_surplus_never_negative(self, remaining):
        manager = RolloverManager()
        carried = manager.calculate_rollover(
            _budget(10_000, rule=RolloverRule.ROLLOVER_SURPLUS), 10_000 - remaining, remaining
        )
        assert carried == max(remaining, 0)

    @given(
        rule=st.sampled_from(list(RolloverRule)),
        remaining=st.integers(min_value=-10**8, max_value=10**8),
    )
    def test_never_carries_more_than_remaining(self, rule, remaining):
        carried = RolloverManager().calculate_rollover(_budget(10_000, rule=rule), 0, remaining)
        assert carried <= max(remaining, 0)

    @given(end=st.dates(min_value=date(2000, 1, 1), max_value=date(2090, 12, 31)))
    def test_successor_starts_day_after(self, end):
        budget = replace(_budget(10_000), start_date=end - timedelta(days=27), end_date=end)
        draft = RolloverManager().create_next_period_budget(budget, 0)
        assert draft.start_date == end + timedelta(days=1)
        assert draft.end_date > draft.start_date


class TestPermissionProperties:
    @given(owners=st.lists(st.sampled_from([OWNER, OTHER]), max_size=20))
    def test_user_sees_only_own(self, owners):
        items = [_expense(1, date(2024, 1, 1), user_id=o) for o in owners]
        visible = checker.filter_by_permissions(items, ActorContext(OWNER, UserRole.USER))
        assert visible == [i for i in items if i.user_id == OWNER]

    @given(
        owners=st.lists(st.sampled_from([OWNER, OTHER]), max_size=20),
        role=st.sampled_from([UserRole.ADMIN, UserRole.ACCOUNTANT]),
    )
    def test_privileged_sees_identity(self, owners, role):
        items = [_expense(1, date(2024, 1, 1), user_id=o) for o in owners]
        assert checker.filter_by_permissions(items, ActorContext(OWNER, role)) == items


class TestAuditDiffProperties:
    @given(
        amount=amounts,
        notes=st.one_of(st.none(), st.text(max_size=20)),
        touch_bookkeeping=st.booleans(),
    )
    def test_bookkeeping_never_reported(self, amount, notes, touch_bookkeeping):
        old = _expense(1000, date(2024, 1, 10))
        new = replace(old, amount=amount, notes=notes)
        if touch_bookkeeping:
            new = replace(new, updated_at=NOW, updated_by=OTHER)
        changes = update_changes(old, new)
        assert not {c.field for c in changes} & BOOKKEEPING_FIELDS
        assert {c.field for c in changes} == (
            ({"amount"} if amount != 1000 else set()) | ({"notes"} if notes is not None else set())
        )
