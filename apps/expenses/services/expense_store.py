"""
Lifecycle of expenses and their splits.

An expense and its splits are written as one unit: the splits are computed
up front by the split allocator and replaced wholesale whenever the amount,
split method or participants change, all inside a single transaction.
"""
import logging

from apps.expenses.conf import ledger_setting
from apps.expenses.models import Expense
from apps.expenses.services.repositories import ExpenseRepository
from apps.expenses.services.split_allocator import allocate, make_split
from apps.groups.permissions import AuthorizationGate
from apps.travels.services import resolve_travel_group
from common.exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)

SPLIT_FIELDS = ('amount', 'split_method', 'split_between', 'custom_splits')

# Changes accepted by update_expense, mapped to model attributes.
UPDATABLE_FIELDS = {
    'amount': 'amount',
    'title': 'title',
    'category_id': 'category_id',
    'paid_by': 'paid_by_id',
    'split_method': 'split_method',
    'date': 'date',
    'memo': 'memo',
    'receipt_image': 'receipt_image',
    'itinerary_item_id': 'itinerary_item_id',
}

BLANK_WHEN_NONE = ('memo', 'receipt_image')


class ExpenseStore:
    """
    Creates, updates, deletes and reads expenses of a travel.

    Every mutation resolves the owning travel group and passes it through the
    authorization gate before anything is written.
    """

    def __init__(self, repository=None, gate=None, resolver=None):
        self.repository = repository or ExpenseRepository()
        self.gate = gate or AuthorizationGate()
        self.resolve_travel_group = resolver or resolve_travel_group

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_expense(
        self,
        travel_id,
        *,
        paid_by,
        category_id,
        amount,
        title,
        split,
        participants,
        date,
        requesting_user_id,
        memo='',
        receipt_image='',
        itinerary_item_id=None,
    ):
        travel_group = self.resolve_travel_group(travel_id)
        self.gate.ensure_member(travel_group, requesting_user_id)

        self._check_category(category_id)
        self._check_payer(travel_group, paid_by)
        self._check_participants(travel_group, participants)
        self._check_itinerary_item(travel_group, itinerary_item_id)
        shares = allocate(amount, split, participants)

        with self.repository.transaction():
            expense = self.repository.create(
                travel_id=travel_group.travel_id,
                title=title,
                amount=amount,
                category_id=category_id,
                split_method=split.method,
                paid_by_id=paid_by,
                date=date,
                memo=memo or '',
                receipt_image=receipt_image or '',
                itinerary_item_id=itinerary_item_id,
                created_by_id=requesting_user_id,
            )
            self.repository.replace_splits(expense, shares)

        logger.info(
            'Expense %s created in travel %s by %s (%s split across %d)',
            expense.id,
            travel_group.travel_id,
            requesting_user_id,
            split.method,
            len(shares),
        )
        return self.repository.get_detail(expense.id)

    def update_expense(self, expense_id, changes, requesting_user_id):
        """
        Apply a partial update.

        If any of amount, split method, participants or custom splits is
        among *changes*, the splits are recomputed from the merged values and
        replace the stored ones in the same transaction.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS) - set(SPLIT_FIELDS)
        if unknown:
            raise ValidationError(f'Unknown fields: {", ".join(sorted(unknown))}.')

        with self.repository.transaction():
            expense = self.repository.get(expense_id, for_update=True)
            if expense is None:
                raise NotFound('Expense not found.')

            travel_group = self.resolve_travel_group(expense.travel_id)
            self.gate.ensure_member(travel_group, requesting_user_id)

            if 'category_id' in changes:
                self._check_category(changes['category_id'])
            if 'paid_by' in changes:
                self._check_payer(travel_group, changes['paid_by'])
            if changes.get('itinerary_item_id') is not None:
                self._check_itinerary_item(travel_group, changes['itinerary_item_id'])

            shares = None
            if any(field in changes for field in SPLIT_FIELDS):
                shares = self._resplit(expense, changes, travel_group)

            updated = []
            for key, attr in UPDATABLE_FIELDS.items():
                if key not in changes:
                    continue
                value = changes[key]
                if value is None and key in BLANK_WHEN_NONE:
                    value = ''
                setattr(expense, attr, value)
                updated.append(attr)

            self.repository.save(expense, updated)
            if shares is not None:
                self.repository.replace_splits(expense, shares)

        logger.info(
            'Expense %s updated by %s (fields: %s, splits replaced: %s)',
            expense.id,
            requesting_user_id,
            ', '.join(sorted(changes)) or '-',
            shares is not None,
        )
        return self.repository.get_detail(expense.id)

    def delete_expense(self, expense_id, requesting_user_id):
        with self.repository.transaction():
            expense = self.repository.get(expense_id, for_update=True)
            if expense is None:
                raise NotFound('Expense not found.')

            travel_group = self.resolve_travel_group(expense.travel_id)
            self.gate.ensure_member(travel_group, requesting_user_id)

            self.repository.delete(expense)

        logger.info('Expense %s deleted by %s', expense_id, requesting_user_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_expense(self, expense_id, requesting_user_id=None):
        expense = self.repository.get_detail(expense_id)
        if expense is None:
            raise NotFound('Expense not found.')
        if ledger_setting('READS_REQUIRE_MEMBERSHIP'):
            travel_group = self.resolve_travel_group(expense.travel_id)
            self.gate.ensure_member(travel_group, requesting_user_id)
        return expense

    def get_expenses_by_travel(self, travel_id, requesting_user_id=None):
        travel_group = self.resolve_travel_group(travel_id)
        if ledger_setting('READS_REQUIRE_MEMBERSHIP'):
            self.gate.ensure_member(travel_group, requesting_user_id)
        return self.repository.list_by_travel(travel_group.travel_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resplit(self, expense, changes, travel_group):
        amount = changes.get('amount', expense.amount)
        method = changes.get('split_method', expense.split_method)
        custom_splits = changes.get('custom_splits')
        current = self.repository.splits_of(expense.id)

        if (
            method == Expense.SplitMethod.CUSTOM
            and custom_splits is None
            and expense.split_method == Expense.SplitMethod.CUSTOM
        ):
            # Keep the stored custom amounts; they must still match the total.
            custom_splits = [
                {'userId': user_id, 'amount': share}
                for user_id, share in current
            ]

        if changes.get('split_between') is not None:
            participants = list(changes['split_between'])
        elif method == Expense.SplitMethod.CUSTOM and custom_splits:
            participants = [entry['userId'] for entry in custom_splits]
        else:
            participants = [user_id for user_id, _ in current]

        split = make_split(method, custom_splits)
        self._check_participants(travel_group, participants)
        return allocate(amount, split, participants)

    def _check_category(self, category_id):
        if not self.repository.category_exists(category_id):
            raise ValidationError(
                f'Unknown expense category: {category_id}.',
                details={'categoryId': 'Does not exist.'},
            )

    def _check_payer(self, travel_group, paid_by):
        if not self.gate.is_member(travel_group, paid_by):
            raise ValidationError(
                'The payer must be a member of the travel group.',
                details={'paidBy': 'Not a member of this travel group.'},
            )

    def _check_participants(self, travel_group, participants):
        outsiders = sorted(
            str(uid) for uid in participants
            if not self.gate.is_member(travel_group, uid)
        )
        if outsiders:
            raise ValidationError(
                'Every participant must be a member of the travel group.',
                details={'splitBetween': outsiders},
            )

    def _check_itinerary_item(self, travel_group, itinerary_item_id):
        if itinerary_item_id is None:
            return
        travel_id = self.repository.itinerary_item_travel_id(itinerary_item_id)
        if travel_id is None or str(travel_id) != travel_group.travel_id:
            raise ValidationError(
                'The itinerary item does not belong to this travel.',
                details={'itineraryItemId': 'Not part of this travel.'},
            )
