from django.urls import path

from . import views

urlpatterns = [
    path('campaign-stats/', views.campaign_stats, name='campaign-stats'),
    path('refresh-snapshots/', views.refresh_snapshots, name='refresh-snapshots'),
]
