from django.urls import path

from .views import CampaignMappingView

urlpatterns = [
    path('', CampaignMappingView.as_view(), name='campaign-mappings'),
]
