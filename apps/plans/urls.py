from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'plans'

router = DefaultRouter()
router.register(r'', views.PlanViewSet, basename='plan')

urlpatterns = [
    # GET    /api/plans/                        - List user's plans
    # POST   /api/plans/                        - Create plan
    # GET    /api/plans/{id}/                   - Get plan details
    # GET    /api/plans/{id}/members/           - List active members
    # POST   /api/plans/{id}/add_member/        - Add member (admin)
    # POST   /api/plans/{id}/leave/             - Leave plan
    # POST   /api/plans/{id}/remove_member/     - Remove member (admin)
    # GET    /api/plans/{id}/activities/        - List activities
    # POST   /api/plans/{id}/activities/        - Create activity
    path('', include(router.urls)),
]
