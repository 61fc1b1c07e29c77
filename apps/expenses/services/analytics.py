"""
Spending analytics and net balances of a travel.

Everything is recomputed from the committed expenses and splits on each call;
nothing is cached between calls. Sums are kept in integer minor units so the
balances of a travel always add up to exactly zero.
"""
import logging
from collections import defaultdict

from apps.expenses.conf import ledger_setting
from apps.expenses.services.repositories import ExpenseRepository
from apps.expenses.services.split_allocator import from_minor_units, to_minor_units
from apps.groups.permissions import AuthorizationGate
from apps.travels.services import resolve_travel_group

logger = logging.getLogger(__name__)


class ExpenseAnalytics:

    def __init__(self, repository=None, gate=None, resolver=None):
        self.repository = repository or ExpenseRepository()
        self.gate = gate or AuthorizationGate()
        self.resolve_travel_group = resolver or resolve_travel_group

    def get_analytics(self, travel_id, requesting_user_id=None):
        """
        Summarise the expenses of a travel.

        Returns
        -------
        dict
            ``totalAmount``, ``categoryTotals`` (by category id),
            ``payerTotals`` (by user id), ``balances`` (amount paid minus
            amount owed, by user id) and ``expenseCount``.
        """
        travel_group = self.resolve_travel_group(travel_id)
        if ledger_setting('READS_REQUIRE_MEMBERSHIP'):
            self.gate.ensure_member(travel_group, requesting_user_id)

        # Both reads see the same committed state.
        with self.repository.transaction():
            expenses = self.repository.amounts_for_travel(travel_group.travel_id)
            splits = self.repository.splits_for_travel(travel_group.travel_id)

        total = 0
        by_category = defaultdict(int)
        by_payer = defaultdict(int)
        balances = defaultdict(int)

        for amount, category_id, paid_by_id in expenses:
            units = to_minor_units(amount)
            total += units
            by_category[str(category_id)] += units
            by_payer[str(paid_by_id)] += units
            balances[str(paid_by_id)] += units

        for user_id, amount in splits:
            balances[str(user_id)] -= to_minor_units(amount)

        logger.debug(
            'Analytics for travel %s computed from %d expenses and %d splits',
            travel_group.travel_id,
            len(expenses),
            len(splits),
        )
        return {
            'totalAmount': from_minor_units(total),
            'categoryTotals': _to_amounts(by_category),
            'payerTotals': _to_amounts(by_payer),
            'balances': _to_amounts(balances),
            'expenseCount': len(expenses),
        }


def _to_amounts(units_by_key):
    return {key: from_minor_units(units) for key, units in units_by_key.items()}
