from rest_framework import serializers
from .models import Plan, PlanMembership, Activity, MembershipStatus
from apps.accounts.serializers import UserMinimalSerializer


class PlanSerializer(serializers.ModelSerializer):
    """Main serializer for plans."""

    owner = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Plan
        fields = [
            'id',
            'name',
            'description',
            'owner',
            'member_count',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        """Number of active members."""
        return obj.memberships.filter(status=MembershipStatus.ACTIVE).count()

    def get_user_role(self, obj):
        """Current user's role in the plan."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.get_user_role(request.user)
        return None


class PlanCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating plans."""

    class Meta:
        model = Plan
        fields = ['name', 'description']


class PlanMemberSerializer(serializers.ModelSerializer):
    """Detailed member information."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = PlanMembership
        fields = ['id', 'user', 'role', 'status', 'joined_at']
        read_only_fields = fields


class MemberInputSerializer(serializers.Serializer):
    """Target user for add/remove member actions."""

    user_id = serializers.UUIDField()


class ActivitySerializer(serializers.ModelSerializer):

    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Activity
        fields = ['id', 'plan', 'name', 'description', 'created_by', 'created_at']
        read_only_fields = ['id', 'plan', 'created_by', 'created_at']
