"""
Management command to seed the default expense categories.

Usage:
    python manage.py seed_expense_categories

Safe to run repeatedly: existing categories are updated in place.
"""
from django.core.management.base import BaseCommand

from apps.expenses.models import ExpenseCategory

DEFAULT_CATEGORIES = [
    {'id': 'transport', 'name': '交通費', 'color': '#3B82F6', 'icon': '🚗'},
    {'id': 'accommodation', 'name': '宿泊費', 'color': '#10B981', 'icon': '🏨'},
    {'id': 'food', 'name': '食事', 'color': '#F59E0B', 'icon': '🍽️'},
    {'id': 'entertainment', 'name': '観光・娯楽', 'color': '#EF4444', 'icon': '🎡'},
    {'id': 'shopping', 'name': '買い物', 'color': '#8B5CF6', 'icon': '🛍️'},
    {'id': 'other', 'name': 'その他', 'color': '#6B7280', 'icon': '📝'},
]


class Command(BaseCommand):
    help = 'Create or update the default expense categories'

    def handle(self, *args, **options):
        created_count = 0
        for entry in DEFAULT_CATEGORIES:
            values = dict(entry)
            category_id = values.pop('id')
            _, created = ExpenseCategory.objects.update_or_create(
                id=category_id,
                defaults=values,
            )
            created_count += created

        self.stdout.write(
            self.style.SUCCESS(
                f'Expense categories ready: {created_count} created, '
                f'{len(DEFAULT_CATEGORIES) - created_count} updated.'
            )
        )
