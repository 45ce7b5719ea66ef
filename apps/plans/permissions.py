from rest_framework import permissions


class IsActivePlanMember(permissions.BasePermission):
    """
    Permission: User must be an active member of the plan.
    """

    message = 'You are not a member of this plan.'

    def has_object_permission(self, request, view, obj):
        # obj is a Plan instance
        return obj.has_active_member(request.user)
