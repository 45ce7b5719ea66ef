from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination

from .serializers import (
    PlanSerializer,
    PlanCreateSerializer,
    PlanMemberSerializer,
    MemberInputSerializer,
    ActivitySerializer,
)
from .permissions import IsActivePlanMember

from apps.plans.services import (
    create_plan,
    add_member,
    leave_plan,
    remove_member,
    get_active_memberships,
    create_activity,
    get_plan_activities,
    get_user_plans,
    # Exceptions
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    InsufficientPermissionsError,
    UserNotFoundError,
)


class PlanPagination(PageNumberPagination):
    """Custom pagination for plans."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PlanViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for plans the current user belongs to.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all plans (user is active member of)
    create: Create a new plan
    retrieve: Get a specific plan
    """

    serializer_class = PlanSerializer
    permission_classes = [IsAuthenticated, IsActivePlanMember]
    pagination_class = PlanPagination

    def get_queryset(self):
        """Return only plans where user is an active member."""
        return get_user_plans(user=self.request.user)

    def get_serializer_class(self):
        if self.action == 'create':
            return PlanCreateSerializer
        return PlanSerializer

    def create(self, request, *args, **kwargs):
        """Create a new plan."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        plan = create_plan(
            name=serializer.validated_data['name'],
            owner=request.user,
            description=serializer.validated_data.get('description', ''),
        )

        output_serializer = PlanSerializer(plan, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get active members of the plan."""
        plan = self.get_object()
        memberships = get_active_memberships(plan_id=plan.id)
        serializer = PlanMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def add_member(self, request, pk=None):
        """Add a user to the plan (admin only)."""
        plan = self.get_object()
        serializer = MemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = add_member(
                plan_id=plan.id,
                user_id=serializer.validated_data['user_id'],
                added_by=request.user
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AlreadyMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PlanMemberSerializer(membership).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave the plan."""
        plan = self.get_object()
        try:
            leave_plan(plan_id=plan.id, user=request.user)
        except (OwnerCannotLeaveError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def remove_member(self, request, pk=None):
        """Remove a member from the plan (admin only)."""
        plan = self.get_object()
        serializer = MemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_member(
                plan_id=plan.id,
                user_id=serializer.validated_data['user_id'],
                removed_by=request.user
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (CannotRemoveOwnerError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get', 'post'])
    def activities(self, request, pk=None):
        """List or create activities of the plan."""
        plan = self.get_object()

        if request.method == 'GET':
            activities = get_plan_activities(plan_id=plan.id, user=request.user)
            return Response(ActivitySerializer(activities, many=True).data)

        serializer = ActivitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        activity = create_activity(
            plan_id=plan.id,
            user=request.user,
            name=serializer.validated_data['name'],
            description=serializer.validated_data.get('description', ''),
        )
        return Response(ActivitySerializer(activity).data, status=status.HTTP_201_CREATED)
