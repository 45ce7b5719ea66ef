from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class SplitType(models.TextChoices):
    EQUAL = 'EQUAL', 'Equal'
    CUSTOM = 'CUSTOM', 'Custom'
    BY_ITEM = 'BY_ITEM', 'By item'


class Expense(models.Model):
    """A single cost fronted by one plan member (the payer)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    plan = models.ForeignKey(
        'plans.Plan',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    activity = models.ForeignKey(
        'plans.Activity',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )

    # Member who fronted the money
    payer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expenses_paid'
    )

    title = models.CharField(max_length=100)
    description = models.TextField(max_length=500, blank=True)

    # Financial details
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3, default='USD')
    split_type = models.CharField(
        max_length=10,
        choices=SplitType.choices,
        default=SplitType.EQUAL
    )
    receipt = models.URLField(max_length=500, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['plan', 'created_at'], name='expenses_plan_id_0b8f3c_idx'),
            models.Index(fields=['payer', 'created_at'], name='expenses_payer_i_c4a2d7_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} - {self.amount} {self.currency}"


class ExpenseShare(models.Model):
    """One member's allocated portion of an expense, with paid state."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='shares'
    )
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expense_shares'
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Payment tracking; paid_at is set only on the unpaid -> paid transition
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expense_shares'
        constraints = [
            models.UniqueConstraint(fields=['expense', 'user'], name='unique_share_per_expense_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'is_paid'], name='expense_sha_user_id_9d1e6a_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        state = 'paid' if self.is_paid else 'unpaid'
        return f"{self.user.get_display_name()} owes {self.amount} ({state})"
