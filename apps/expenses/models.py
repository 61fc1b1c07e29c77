"""
Models for the Expenses app.
"""
from django.conf import settings
from django.db import models

from common.models import TimestampedModel


class ExpenseCategory(models.Model):
    """
    Reference data for expense categories, seeded once.
    """
    id = models.SlugField(max_length=32, primary_key=True)
    name = models.CharField(max_length=64)
    color = models.CharField(max_length=7, help_text='Hex colour, e.g. #3B82F6.')
    icon = models.CharField(max_length=16, blank=True, default='')

    class Meta:
        db_table = 'expense_categories'
        ordering = ['name']
        verbose_name_plural = 'Expense categories'

    def __str__(self):
        return self.name


class Expense(TimestampedModel):
    """
    An expense recorded within a travel.

    The amounts of its splits always add up to ``amount`` exactly.
    """
    class SplitMethod(models.TextChoices):
        EQUAL = 'equal', 'Equal'
        CUSTOM = 'custom', 'Custom'

    travel = models.ForeignKey(
        'travels.Travel',
        on_delete=models.CASCADE,
        related_name='expenses',
    )
    title = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.PROTECT,
        related_name='expenses',
    )
    split_method = models.CharField(
        max_length=10,
        choices=SplitMethod.choices,
        default=SplitMethod.EQUAL,
    )
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='paid_expenses',
    )
    date = models.DateField()
    memo = models.TextField(blank=True, default='')
    receipt_image = models.URLField(max_length=500, blank=True, default='')
    itinerary_item = models.ForeignKey(
        'travels.ItineraryItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_expenses',
    )

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f'{self.title} - {self.amount}'


class ExpenseSplit(TimestampedModel):
    """
    The share of an expense owed by one participant.
    """
    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='splits',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='expense_splits',
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text='Amount owed by this user for the expense.',
    )
    position = models.PositiveSmallIntegerField(
        default=0,
        help_text='Order of the participant as supplied when splitting.',
    )

    class Meta:
        db_table = 'expense_splits'
        unique_together = ['expense', 'user']
        ordering = ['position']

    def __str__(self):
        return f'{self.user} owes {self.amount} for {self.expense}'


class Budget(TimestampedModel):
    """
    The spending plan of a travel. At most one per travel.
    """
    travel = models.OneToOneField(
        'travels.Travel',
        on_delete=models.CASCADE,
        related_name='budget',
    )
    total_budget = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_budgets',
    )

    class Meta:
        db_table = 'budgets'

    def __str__(self):
        return f'Budget for {self.travel}: {self.total_budget}'


class CategoryBudget(models.Model):
    """
    A planned spending cap for one category within a budget.
    """
    budget = models.ForeignKey(
        Budget,
        on_delete=models.CASCADE,
        related_name='category_budgets',
    )
    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.PROTECT,
        related_name='category_budgets',
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'category_budgets'
        unique_together = ['budget', 'category']
        ordering = ['category__name']

    def __str__(self):
        return f'{self.category}: {self.amount}'
