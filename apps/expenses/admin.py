"""
Admin configuration for the Expenses app.
"""
from django.contrib import admin

from apps.expenses.models import Budget, CategoryBudget, Expense, ExpenseCategory, ExpenseSplit


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'color', 'icon']
    search_fields = ['id', 'name']


class ExpenseSplitInline(admin.TabularInline):
    model = ExpenseSplit
    extra = 0
    fields = ['position', 'user', 'amount']
    ordering = ['position']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'amount',
        'category',
        'split_method',
        'paid_by',
        'travel',
        'date',
    ]
    list_filter = ['category', 'split_method', 'date']
    search_fields = ['title', 'memo', 'paid_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ExpenseSplitInline]


class CategoryBudgetInline(admin.TabularInline):
    model = CategoryBudget
    extra = 0


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ['travel', 'total_budget', 'created_by', 'updated_at']
    search_fields = ['travel__name', 'created_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CategoryBudgetInline]
