# ==========================================
# apps/plans/models.py
# ==========================================

from django.db import models
import uuid


class PlanRole(models.TextChoices):
    OWNER = 'OWNER', 'Owner'
    ADMIN = 'ADMIN', 'Admin'
    MEMBER = 'MEMBER', 'Member'


class MembershipStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    REMOVED = 'REMOVED', 'Removed'
    LEFT = 'LEFT', 'Left'


class Plan(models.Model):
    """Shared group context (trip, event) whose active members split costs."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='owned_plans')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'plans'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='plans_owner_i_3c6d1a_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def has_active_member(self, user):
        return self.memberships.filter(user=user, status=MembershipStatus.ACTIVE).exists()

    def get_user_role(self, user):
        try:
            return self.memberships.get(user=user, status=MembershipStatus.ACTIVE).role
        except PlanMembership.DoesNotExist:
            return None

    def is_admin(self, user):
        role = self.get_user_role(user)
        return role in [PlanRole.OWNER, PlanRole.ADMIN]


class PlanMembership(models.Model):
    """User membership in a plan with role and lifecycle status."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='plan_memberships')
    plan = models.ForeignKey(Plan, on_delete=models.CASCADE, related_name='memberships')
    role = models.CharField(max_length=20, choices=PlanRole.choices, default=PlanRole.MEMBER)
    status = models.CharField(
        max_length=20,
        choices=MembershipStatus.choices,
        default=MembershipStatus.ACTIVE
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'plan_memberships'
        unique_together = [['plan', 'user']]
        indexes = [
            models.Index(fields=['plan', 'status'], name='plan_member_plan_id_8f2b4e_idx'),
            models.Index(fields=['user', 'joined_at'], name='plan_member_user_id_a71c09_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.plan.name} ({self.role}, {self.status})"

    def save(self, *args, **kwargs):
        if self.plan.owner_id == self.user_id:
            self.role = PlanRole.OWNER
        super().save(*args, **kwargs)


class Activity(models.Model):
    """Activity scheduled within a plan; expenses may be attached to one."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    plan = models.ForeignKey(Plan, on_delete=models.CASCADE, related_name='activities')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_activities'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activities'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.plan.name} - {self.name}"
