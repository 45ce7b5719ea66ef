# ==========================================
# apps/plans/admin.py
# ==========================================

from django.contrib import admin
from apps.plans.models import Plan, PlanMembership, Activity, MembershipStatus


class PlanMembershipInline(admin.TabularInline):
    """Inline admin for plan memberships."""
    model = PlanMembership
    extra = 0
    fields = ['user', 'role', 'status', 'joined_at']
    readonly_fields = ['joined_at']


class ActivityInline(admin.TabularInline):
    model = Activity
    extra = 0
    fields = ['name', 'created_by', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    """Admin interface for Plans."""

    list_display = [
        'name',
        'owner',
        'active_member_count',
        'created_at'
    ]
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [PlanMembershipInline, ActivityInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def active_member_count(self, obj):
        """Show number of active members."""
        return obj.memberships.filter(status=MembershipStatus.ACTIVE).count()
    active_member_count.short_description = 'Members'


@admin.register(PlanMembership)
class PlanMembershipAdmin(admin.ModelAdmin):
    list_display = ['user', 'plan', 'role', 'status', 'joined_at']
    list_filter = ['role', 'status', 'joined_at']
    search_fields = ['user__email', 'plan__name']
    readonly_fields = ['joined_at']
