"""
Persistence for the expense and budget aggregates.

The services never touch the ORM directly: they receive a repository and
wrap every multi-row write in ``repository.transaction()``. Leaving that
block by any exception rolls the whole transaction back, and storage
failures surface as ``PersistenceError``.
"""
import logging
from contextlib import contextmanager
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import Sum

from apps.expenses.models import (
    Budget,
    CategoryBudget,
    Expense,
    ExpenseCategory,
    ExpenseSplit,
)
from apps.travels.models import ItineraryItem
from common.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def _first_by_pk(queryset, pk):
    try:
        return queryset.filter(pk=pk).first()
    except (DjangoValidationError, ValueError):
        return None


class BaseRepository:

    @contextmanager
    def transaction(self):
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            logger.exception('Ledger transaction rolled back')
            raise PersistenceError() from exc


class ExpenseRepository(BaseRepository):
    """Reads and writes ``Expense`` rows together with their splits."""

    def _expenses(self):
        return Expense.objects.select_related(
            'category', 'paid_by', 'created_by',
        ).prefetch_related('splits__user')

    def get(self, expense_id, for_update=False):
        queryset = Expense.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        return _first_by_pk(queryset, expense_id)

    def get_detail(self, expense_id):
        return _first_by_pk(self._expenses(), expense_id)

    def list_by_travel(self, travel_id):
        return list(self._expenses().filter(travel_id=travel_id))

    def category_exists(self, category_id):
        return ExpenseCategory.objects.filter(pk=category_id).exists()

    def itinerary_item_travel_id(self, itinerary_item_id):
        return (
            ItineraryItem.objects.filter(pk=itinerary_item_id)
            .values_list('travel_id', flat=True)
            .first()
        )

    def splits_of(self, expense_id):
        return list(
            ExpenseSplit.objects.filter(expense_id=expense_id)
            .order_by('position')
            .values_list('user_id', 'amount')
        )

    def create(self, **fields):
        return Expense.objects.create(**fields)

    def save(self, expense, fields):
        expense.save(update_fields=[*fields, 'updated_at'])

    def replace_splits(self, expense, shares):
        ExpenseSplit.objects.filter(expense=expense).delete()
        ExpenseSplit.objects.bulk_create([
            ExpenseSplit(
                expense=expense,
                user_id=share.user_id,
                amount=share.amount,
                position=position,
            )
            for position, share in enumerate(shares)
        ])

    def delete(self, expense):
        ExpenseSplit.objects.filter(expense=expense).delete()
        expense.delete()

    def amounts_for_travel(self, travel_id):
        return list(
            Expense.objects.filter(travel_id=travel_id)
            .values_list('amount', 'category_id', 'paid_by_id')
        )

    def splits_for_travel(self, travel_id):
        return list(
            ExpenseSplit.objects.filter(expense__travel_id=travel_id)
            .values_list('user_id', 'amount')
        )


class BudgetRepository(BaseRepository):
    """Reads and writes a travel's ``Budget`` and its category budgets."""

    def get_by_travel(self, travel_id):
        return (
            Budget.objects.filter(travel_id=travel_id)
            .prefetch_related('category_budgets__category')
            .first()
        )

    def existing_category_ids(self, category_ids):
        return set(
            ExpenseCategory.objects.filter(pk__in=category_ids)
            .values_list('id', flat=True)
        )

    def get_or_create_for_update(self, travel_id, created_by_id):
        budget = Budget.objects.select_for_update().filter(travel_id=travel_id).first()
        if budget is not None:
            return budget, False
        return Budget.objects.create(travel_id=travel_id, created_by_id=created_by_id), True

    def save(self, budget, fields):
        budget.save(update_fields=[*fields, 'updated_at'])

    def category_budget_total(self, budget):
        total = CategoryBudget.objects.filter(budget=budget).aggregate(
            total=Sum('amount'),
        )['total']
        return total or Decimal('0')

    def replace_category_budgets(self, budget, entries):
        CategoryBudget.objects.filter(budget=budget).delete()
        CategoryBudget.objects.bulk_create([
            CategoryBudget(
                budget=budget,
                category_id=entry['categoryId'],
                amount=entry['amount'],
            )
            for entry in entries
        ])
