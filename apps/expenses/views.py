"""
Views for the Expenses app.

Views only translate HTTP to service calls: authorization, validation of
references and all writes happen in the ledger services, whose errors are
rendered by ``common.exceptions.custom_exception_handler``.
"""
import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.expenses.models import ExpenseCategory
from apps.expenses.serializers import (
    BudgetSerializer,
    BudgetUpsertSerializer,
    ExpenseAnalyticsSerializer,
    ExpenseCategorySerializer,
    ExpenseSerializer,
    ExpenseWriteSerializer,
)
from apps.expenses.services.analytics import ExpenseAnalytics
from apps.expenses.services.budget_tracker import BudgetTracker
from apps.expenses.services.expense_store import ExpenseStore

logger = logging.getLogger(__name__)


def _missing_travel_id():
    return Response(
        {
            'success': False,
            'error': {
                'code': 'validation_error',
                'message': 'travelId query parameter is required.',
            },
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class ExpenseCategoryListView(APIView):
    """
    GET /api/v1/expense-categories/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        categories = ExpenseCategory.objects.all()
        return Response({
            'success': True,
            'data': ExpenseCategorySerializer(categories, many=True).data,
        })


class ExpenseListView(APIView):
    """
    List the expenses of a travel, newest first.

    GET /api/v1/expenses/?travelId=<travel_id>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        travel_id = request.query_params.get('travelId')
        if not travel_id:
            return _missing_travel_id()

        expenses = ExpenseStore().get_expenses_by_travel(travel_id, request.user.id)
        return Response({
            'success': True,
            'data': ExpenseSerializer(expenses, many=True).data,
        })


class TravelExpenseCreateView(APIView):
    """
    POST /api/v1/travels/{travel_id}/expenses/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, travel_id):
        serializer = ExpenseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        expense = ExpenseStore().create_expense(
            travel_id,
            requesting_user_id=request.user.id,
            **serializer.to_create_kwargs(),
        )
        return Response(
            {
                'success': True,
                'data': ExpenseSerializer(expense).data,
            },
            status=status.HTTP_201_CREATED,
        )


class ExpenseDetailView(APIView):
    """
    read:   GET    /api/v1/expenses/{id}/
    update: PATCH  /api/v1/expenses/{id}/
    delete: DELETE /api/v1/expenses/{id}/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, expense_id):
        expense = ExpenseStore().get_expense(expense_id, request.user.id)
        return Response({'success': True, 'data': ExpenseSerializer(expense).data})

    def patch(self, request, expense_id):
        serializer = ExpenseWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        expense = ExpenseStore().update_expense(
            expense_id,
            serializer.to_changes(),
            request.user.id,
        )
        return Response({'success': True, 'data': ExpenseSerializer(expense).data})

    def delete(self, request, expense_id):
        ExpenseStore().delete_expense(expense_id, request.user.id)
        return Response({
            'success': True,
            'data': {'message': 'Expense deleted successfully'},
        })


class BudgetView(APIView):
    """
    Budget of a travel, or null if none has been set.

    GET /api/v1/budgets/?travelId=<travel_id>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        travel_id = request.query_params.get('travelId')
        if not travel_id:
            return _missing_travel_id()

        budget = BudgetTracker().get_budget(travel_id, request.user.id)
        data = BudgetSerializer(budget).data if budget is not None else None
        return Response({'success': True, 'data': data})


class TravelBudgetView(APIView):
    """
    Create or update the budget of a travel.

    POST /api/v1/travels/{travel_id}/budgets/
    Body: {"totalBudget": "500.00", "categoryBudgets": [{"categoryId", "amount"}]}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, travel_id):
        serializer = BudgetUpsertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        budget = BudgetTracker().upsert_budget(
            travel_id,
            requesting_user_id=request.user.id,
            **serializer.to_upsert_kwargs(),
        )
        return Response({'success': True, 'data': BudgetSerializer(budget).data})


class ExpenseAnalyticsView(APIView):
    """
    GET /api/v1/travels/{travel_id}/expense-analytics/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, travel_id):
        analytics = ExpenseAnalytics().get_analytics(travel_id, request.user.id)
        return Response({
            'success': True,
            'data': ExpenseAnalyticsSerializer(analytics).data,
        })
