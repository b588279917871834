from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AccountConnectionViewSet, PlatformStatsView, VerifyCredentialsView

router = DefaultRouter()
router.register(r'connections', AccountConnectionViewSet, basename='connection')

urlpatterns = [
    path('', include(router.urls)),
    path('<str:platform>/verify/', VerifyCredentialsView.as_view(), name='platform-verify'),
    path('<str:platform>/stats/', PlatformStatsView.as_view(), name='platform-stats'),
]
