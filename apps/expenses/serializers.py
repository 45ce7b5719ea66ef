from decimal import Decimal
from rest_framework import serializers
from .models import Expense, ExpenseShare, SplitType
from apps.accounts.serializers import UserMinimalSerializer
from apps.plans.models import Activity


# =============================================================================
# Input Serializers
# =============================================================================

class ShareInputSerializer(serializers.Serializer):
    """One explicit share for CUSTOM / BY_ITEM splits."""

    user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate input for creating an expense.

    Fields:
        title (str): Expense title, max 100 chars
        description (str): Optional, max 500 chars
        amount (Decimal): Positive total
        currency (str): Optional 3-letter code
        split_type (str): EQUAL (default), CUSTOM or BY_ITEM
        activity_id (UUID): Optional activity in the same plan
        receipt (url): Optional receipt link
        shares (list): Required for CUSTOM / BY_ITEM
    """

    title = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    currency = serializers.CharField(min_length=3, max_length=3, required=False)
    split_type = serializers.ChoiceField(choices=SplitType.choices, default=SplitType.EQUAL)
    activity_id = serializers.UUIDField(required=False, allow_null=True)
    receipt = serializers.URLField(max_length=500, required=False, allow_blank=True)
    shares = ShareInputSerializer(many=True, required=False)

    def validate(self, attrs):
        """Explicit split types need explicit shares; EQUAL takes none."""
        if attrs.get('split_type') in (SplitType.CUSTOM, SplitType.BY_ITEM) and not attrs.get('shares'):
            raise serializers.ValidationError({
                'shares': 'Shares are required for custom and by-item splits'
            })
        if attrs.get('split_type') == SplitType.EQUAL and attrs.get('shares'):
            raise serializers.ValidationError({
                'shares': 'Shares cannot be given for an equal split'
            })
        return attrs


class ExpenseUpdateSerializer(serializers.Serializer):
    """Validate input for editing an expense; every field is optional."""

    title = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'), required=False)
    currency = serializers.CharField(min_length=3, max_length=3, required=False)
    split_type = serializers.ChoiceField(choices=SplitType.choices, required=False)
    receipt = serializers.URLField(max_length=500, required=False, allow_blank=True)
    shares = ShareInputSerializer(many=True, required=False)

    def validate(self, attrs):
        if attrs.get('split_type') == SplitType.EQUAL and attrs.get('shares'):
            raise serializers.ValidationError({
                'shares': 'Shares cannot be given for an equal split'
            })
        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class ActivityMinimalSerializer(serializers.ModelSerializer):

    class Meta:
        model = Activity
        fields = ['id', 'name']
        read_only_fields = fields


class ExpenseShareSerializer(serializers.ModelSerializer):
    """Serializer for expense shares."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ExpenseShare
        fields = ['id', 'expense', 'user', 'amount', 'is_paid', 'paid_at']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Main serializer for expenses."""

    payer = UserMinimalSerializer(read_only=True)
    activity = ActivityMinimalSerializer(read_only=True)
    shares = ExpenseShareSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'plan',
            'activity',
            'payer',
            'title',
            'description',
            'amount',
            'currency',
            'split_type',
            'receipt',
            'shares',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class MemberBalanceSerializer(serializers.Serializer):
    user = UserMinimalSerializer()
    paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    owed = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    outstanding = serializers.DecimalField(max_digits=14, decimal_places=2)
    owed_to_you = serializers.DecimalField(max_digits=14, decimal_places=2)


class ExpenseSummarySerializer(serializers.Serializer):
    """Serializer for a plan's spending summary."""

    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)
    expense_count = serializers.IntegerField()
    currency = serializers.CharField()
    balances = MemberBalanceSerializer(many=True)


class DebtExpenseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()


class UserDebtSerializer(serializers.Serializer):
    """What the current user owes one creditor."""

    creditor = UserMinimalSerializer()
    total_owed = serializers.DecimalField(max_digits=14, decimal_places=2)
    expenses = DebtExpenseSerializer(many=True)


class TransferSerializer(serializers.Serializer):
    from_user = UserMinimalSerializer()
    to_user = UserMinimalSerializer()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class SettlementPlanSerializer(serializers.Serializer):
    """Suggested transfers that would settle the plan."""

    currency = serializers.CharField()
    transfers = TransferSerializer(many=True)
