"""End-to-end flow through a fully wired BudgetTracker."""

from datetime import date

from budget_config import get_active_config

from budget_kernel.domain.dtos import (
    AlertLevel,
    AuditAction,
    CategoryInput,
    EntityType,
    RolloverRule,
    UserInput,
    UserRole,
)
from budget_kernel.domain.policy import DEFAULT_POLICY
from budget_kernel.services.tracker import BudgetTracker


class TestWiring:
    def test_services_share_collaborators(self, tracker):
        assert tracker.expenses.audit is tracker.audit
        assert tracker.budgets.audit is tracker.audit
        assert tracker.users.audit is tracker.audit
        assert tracker.categories.audit is tracker.audit
        assert tracker.budgets.clock is tracker.clock
        assert tracker.analytics.policy is tracker.policy

    def test_built_from_active_config(self, storage):
        tracker = BudgetTracker(storage, policy=get_active_config())
        assert tracker.policy == DEFAULT_POLICY
        assert tracker.budgets.calculator is not None


class TestMonthLifecycle:
    def test_register_spend_and_roll_over(
        self, tracker, clock, admin_ctx, make_expense_input, make_budget_input
    ):
        dana = tracker.users.register(
            UserInput(email="dana@example.com", name="Dana", role=UserRole.ADMIN)
        )
        assert dana.role is UserRole.USER
        dana_ctx = dana.actor

        books = tracker.categories.create_category(CategoryInput(name="Books"), admin_ctx)
        budget = tracker.budgets.create_budget(
            make_budget_input(books.id, amount=10000, rollover_rule=RolloverRule.ROLLOVER_SURPLUS),
            dana_ctx,
        )
        tracker.expenses.create_expense(make_expense_input(books.id, amount=8000), dana_ctx)

        [status] = tracker.budgets.get_budget_statuses(None, dana_ctx)
        assert (status.spent, status.remaining, status.alert_level) == (
            8000,
            2000,
            AlertLevel.WARNING,
        )

        clock.set_date(date(2024, 2, 1))
        successor = tracker.budgets.roll_over_budget(budget.id, dana_ctx)

        assert successor.amount == 12000
        assert (successor.start_date, successor.end_date) == (date(2024, 2, 1), date(2024, 2, 29))
        assert tracker.budgets.get_budget(budget.id, dana_ctx).is_active is False

        history = tracker.audit.get_entity_history(EntityType.BUDGET, budget.id, admin_ctx)
        assert [e.action for e in history] == [AuditAction.UPDATE, AuditAction.CREATE]
        assert history[0].changed_fields() == ("is_active",)
