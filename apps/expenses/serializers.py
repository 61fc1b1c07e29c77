"""
Serializers for the Expenses app.
All output uses camelCase to match the mobile client.
"""
from decimal import Decimal

from rest_framework import serializers

from apps.expenses.models import Budget, CategoryBudget, Expense, ExpenseCategory, ExpenseSplit
from apps.expenses.services.split_allocator import make_split
from apps.users.serializers import UserSummarySerializer

AMOUNT_DIGITS = 12


class ExpenseCategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'color', 'icon']
        read_only_fields = fields


class ExpenseSplitSerializer(serializers.ModelSerializer):
    userId = serializers.CharField(source='user_id', read_only=True)
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = ExpenseSplit
        fields = ['userId', 'user', 'amount']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Read representation of an expense.

    ``splitBetween`` lists participant ids in the order they were supplied;
    ``customSplits`` is only present for custom splits.
    """
    travelId = serializers.CharField(source='travel_id', read_only=True)
    categoryId = serializers.CharField(source='category_id', read_only=True)
    category = ExpenseCategorySerializer(read_only=True)
    paidBy = serializers.CharField(source='paid_by_id', read_only=True)
    payer = UserSummarySerializer(source='paid_by', read_only=True)
    splitMethod = serializers.CharField(source='split_method', read_only=True)
    splitBetween = serializers.SerializerMethodField()
    customSplits = serializers.SerializerMethodField()
    splits = ExpenseSplitSerializer(many=True, read_only=True)
    receiptImage = serializers.CharField(source='receipt_image', read_only=True)
    itineraryItemId = serializers.CharField(
        source='itinerary_item_id', read_only=True, allow_null=True,
    )
    createdBy = serializers.CharField(source='created_by_id', read_only=True)
    creator = UserSummarySerializer(source='created_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id', 'travelId', 'amount', 'title', 'categoryId', 'category',
            'paidBy', 'payer', 'splitMethod', 'splitBetween', 'customSplits',
            'splits', 'date', 'memo', 'receiptImage', 'itineraryItemId',
            'createdBy', 'creator', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def get_splitBetween(self, obj):
        return [str(split.user_id) for split in obj.splits.all()]

    def get_customSplits(self, obj):
        return [
            {'userId': str(split.user_id), 'amount': str(split.amount)}
            for split in obj.splits.all()
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.split_method != Expense.SplitMethod.CUSTOM:
            data.pop('customSplits')
        return data


class CustomSplitEntrySerializer(serializers.Serializer):
    userId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=AMOUNT_DIGITS, decimal_places=2)


class ExpenseWriteSerializer(serializers.Serializer):
    """
    Accepts the camelCase create/update payload.

    Instantiate with ``partial=True`` for PATCH; only the supplied fields are
    turned into changes.
    """
    # Wire name -> keyword understood by ExpenseStore.
    FIELD_MAP = {
        'amount': 'amount',
        'title': 'title',
        'categoryId': 'category_id',
        'paidBy': 'paid_by',
        'splitBetween': 'split_between',
        'splitMethod': 'split_method',
        'customSplits': 'custom_splits',
        'date': 'date',
        'memo': 'memo',
        'receiptImage': 'receipt_image',
        'itineraryItemId': 'itinerary_item_id',
    }

    amount = serializers.DecimalField(
        max_digits=AMOUNT_DIGITS,
        decimal_places=2,
        min_value=Decimal('0.01'),
    )
    title = serializers.CharField(max_length=255)
    categoryId = serializers.CharField(max_length=32)
    paidBy = serializers.UUIDField()
    splitBetween = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    splitMethod = serializers.ChoiceField(choices=Expense.SplitMethod.choices)
    customSplits = CustomSplitEntrySerializer(many=True, required=False, allow_null=True)
    date = serializers.DateField()
    memo = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    receiptImage = serializers.URLField(
        max_length=500, required=False, allow_blank=True, allow_null=True,
    )
    itineraryItemId = serializers.UUIDField(required=False, allow_null=True)

    def to_changes(self):
        return {
            self.FIELD_MAP[name]: value
            for name, value in self.validated_data.items()
        }

    def to_create_kwargs(self):
        changes = self.to_changes()
        split = make_split(changes.pop('split_method'), changes.pop('custom_splits', None))
        changes['participants'] = changes.pop('split_between')
        changes['split'] = split
        return changes


class CategoryBudgetSerializer(serializers.ModelSerializer):
    categoryId = serializers.CharField(source='category_id', read_only=True)
    category = ExpenseCategorySerializer(read_only=True)

    class Meta:
        model = CategoryBudget
        fields = ['categoryId', 'category', 'amount']
        read_only_fields = fields


class BudgetSerializer(serializers.ModelSerializer):
    travelId = serializers.CharField(source='travel_id', read_only=True)
    totalBudget = serializers.DecimalField(
        source='total_budget',
        max_digits=AMOUNT_DIGITS,
        decimal_places=2,
        read_only=True,
        allow_null=True,
    )
    categoryBudgets = CategoryBudgetSerializer(
        source='category_budgets', many=True, read_only=True,
    )
    createdBy = serializers.CharField(source='created_by_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Budget
        fields = [
            'id', 'travelId', 'totalBudget', 'categoryBudgets',
            'createdBy', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class CategoryBudgetEntrySerializer(serializers.Serializer):
    categoryId = serializers.CharField(max_length=32)
    amount = serializers.DecimalField(
        max_digits=AMOUNT_DIGITS,
        decimal_places=2,
        min_value=Decimal('0'),
    )


class BudgetUpsertSerializer(serializers.Serializer):
    totalBudget = serializers.DecimalField(
        max_digits=AMOUNT_DIGITS,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
    )
    categoryBudgets = CategoryBudgetEntrySerializer(many=True, required=False)

    def to_upsert_kwargs(self):
        kwargs = {}
        if 'totalBudget' in self.validated_data:
            kwargs['total_budget'] = self.validated_data['totalBudget']
        if 'categoryBudgets' in self.validated_data:
            kwargs['category_budgets'] = [
                dict(entry) for entry in self.validated_data['categoryBudgets']
            ]
        return kwargs


class ExpenseAnalyticsSerializer(serializers.Serializer):
    """Renders the analytics summary with amounts as strings."""
    totalAmount = serializers.DecimalField(max_digits=None, decimal_places=2)
    categoryTotals = serializers.DictField(
        child=serializers.DecimalField(max_digits=None, decimal_places=2),
    )
    payerTotals = serializers.DictField(
        child=serializers.DecimalField(max_digits=None, decimal_places=2),
    )
    balances = serializers.DictField(
        child=serializers.DecimalField(max_digits=None, decimal_places=2),
    )
    expenseCount = serializers.IntegerField()
