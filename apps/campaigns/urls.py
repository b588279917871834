from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CampaignViewSet, FormDraftView

router = DefaultRouter()
router.register(r'campaigns', CampaignViewSet)

urlpatterns = [
    path('campaigns/drafts/<slug:key>/', FormDraftView.as_view(), name='form-draft'),
    path('', include(router.urls)),
]
