"""
Per-travel budgets and their category caps.

A travel has at most one budget, created on first write. Supplying a list of
category budgets replaces every existing category budget of that travel.
"""
import logging
from decimal import Decimal

from apps.expenses.conf import ledger_setting
from apps.expenses.services.repositories import BudgetRepository
from apps.expenses.services.split_allocator import to_minor_units
from apps.groups.permissions import AuthorizationGate
from apps.travels.services import resolve_travel_group
from common.exceptions import ValidationError

logger = logging.getLogger(__name__)

UNSET = object()


class BudgetTracker:

    def __init__(self, repository=None, gate=None, resolver=None):
        self.repository = repository or BudgetRepository()
        self.gate = gate or AuthorizationGate()
        self.resolve_travel_group = resolver or resolve_travel_group

    def upsert_budget(
        self,
        travel_id,
        *,
        requesting_user_id,
        total_budget=UNSET,
        category_budgets=None,
    ):
        """
        Create the travel's budget if absent, otherwise update it in place.

        ``total_budget`` is left untouched when not given (``None`` clears
        it). ``category_budgets`` is a list of ``{"categoryId", "amount"}``;
        when given, it becomes the complete set of category budgets.
        """
        travel_group = self.resolve_travel_group(travel_id)
        self.gate.ensure_member(travel_group, requesting_user_id)

        if total_budget is not UNSET and total_budget is not None:
            self._check_amount(total_budget, 'totalBudget')
        if category_budgets is not None:
            self._check_category_budgets(category_budgets)

        with self.repository.transaction():
            budget, created = self.repository.get_or_create_for_update(
                travel_group.travel_id,
                requesting_user_id,
            )

            if total_budget is not UNSET:
                budget.total_budget = total_budget
                self.repository.save(budget, ['total_budget'])

            if category_budgets is not None:
                self.repository.replace_category_budgets(budget, category_budgets)

            if ledger_setting('ENFORCE_CATEGORY_BUDGET_CAP'):
                self._check_cap(budget)

        logger.info(
            'Budget for travel %s %s by %s',
            travel_group.travel_id,
            'created' if created else 'updated',
            requesting_user_id,
        )
        return self.repository.get_by_travel(travel_group.travel_id)

    def get_budget(self, travel_id, requesting_user_id=None):
        """Return the travel's budget, or ``None`` if none has been set."""
        travel_group = self.resolve_travel_group(travel_id)
        if ledger_setting('READS_REQUIRE_MEMBERSHIP'):
            self.gate.ensure_member(travel_group, requesting_user_id)
        return self.repository.get_by_travel(travel_group.travel_id)

    def _check_amount(self, amount, field):
        if to_minor_units(amount) < 0:
            raise ValidationError(
                f'{field} may not be negative.',
                details={field: 'Must be zero or greater.'},
            )

    def _check_category_budgets(self, entries):
        seen = set()
        for entry in entries:
            category_id = entry['categoryId']
            if category_id in seen:
                raise ValidationError(
                    f'Category {category_id} is budgeted more than once.',
                    details={'categoryBudgets': f'Duplicate category {category_id}.'},
                )
            seen.add(category_id)
            self._check_amount(entry['amount'], 'categoryBudgets')

        unknown = seen - self.repository.existing_category_ids(seen)
        if unknown:
            raise ValidationError(
                'Unknown expense categories in categoryBudgets.',
                details={'categoryBudgets': sorted(unknown)},
            )

    def _check_cap(self, budget):
        if budget.total_budget is None:
            return
        allocated = self.repository.category_budget_total(budget)
        if allocated > Decimal(budget.total_budget):
            raise ValidationError(
                f'Category budgets total {allocated}, '
                f'more than the total budget of {budget.total_budget}.',
                details={
                    'totalBudget': str(budget.total_budget),
                    'categoryBudgets': str(allocated),
                },
            )
