# ==========================================
# apps/expenses/admin.py
# ==========================================

from django.contrib import admin
from .models import Expense, ExpenseShare


class ExpenseShareInline(admin.TabularInline):
    """Inline admin for shares within an expense."""
    model = ExpenseShare
    extra = 0
    fields = ['user', 'amount', 'is_paid', 'paid_at']
    readonly_fields = ['user', 'amount', 'is_paid', 'paid_at']

    def has_add_permission(self, request, obj=None):
        """Shares are written by the ledger services only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Read-mostly admin for expenses and their shares."""

    list_display = [
        'title',
        'plan',
        'payer',
        'amount',
        'currency',
        'split_type',
        'created_at',
    ]
    list_filter = ['split_type', 'currency', 'created_at']
    search_fields = ['title', 'description', 'payer__email', 'plan__name']
    readonly_fields = ['amount', 'split_type', 'created_at', 'updated_at']
    inlines = [ExpenseShareInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']


@admin.register(ExpenseShare)
class ExpenseShareAdmin(admin.ModelAdmin):
    list_display = ['expense', 'user', 'amount', 'is_paid', 'paid_at']
    list_filter = ['is_paid']
    search_fields = ['expense__title', 'user__email']
    readonly_fields = ['expense', 'user', 'amount', 'is_paid', 'paid_at', 'created_at']
