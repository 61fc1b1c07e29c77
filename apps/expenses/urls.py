"""
URL configuration for the Expenses app.

Mounted at ``/api/v1/``; travel-scoped routes live here because they only
touch the ledger.
"""
from django.urls import path

from apps.expenses.views import (
    BudgetView,
    ExpenseAnalyticsView,
    ExpenseCategoryListView,
    ExpenseDetailView,
    ExpenseListView,
    TravelBudgetView,
    TravelExpenseCreateView,
)

app_name = 'expenses'

urlpatterns = [
    path('expense-categories/', ExpenseCategoryListView.as_view(), name='category-list'),
    path('expenses/', ExpenseListView.as_view(), name='expense-list'),
    path('expenses/<uuid:expense_id>/', ExpenseDetailView.as_view(), name='expense-detail'),
    path('budgets/', BudgetView.as_view(), name='budget'),
    path(
        'travels/<uuid:travel_id>/expenses/',
        TravelExpenseCreateView.as_view(),
        name='travel-expense-create',
    ),
    path(
        'travels/<uuid:travel_id>/budgets/',
        TravelBudgetView.as_view(),
        name='travel-budget',
    ),
    path(
        'travels/<uuid:travel_id>/expense-analytics/',
        ExpenseAnalyticsView.as_view(),
        name='travel-expense-analytics',
    ),
]
