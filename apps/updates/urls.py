"""
URL configuration for updates app.
"""

from django.urls import path
from . import views

app_name = 'updates'

urlpatterns = [
    # Dashboards
    path('', views.my_updates, name='my_updates'),
    path('team/', views.team_updates, name='team_updates'),
    path('team/export/', views.export_csv, name='export_csv'),

    # HTMX Endpoints
    path('<str:scope>/refresh/', views.feed_refresh, name='feed_refresh'),
    path('<str:scope>/clear/', views.feed_clear, name='feed_clear'),

    # Single update
    path('<uuid:pk>/', views.update_detail, name='update_detail'),
    path('<uuid:pk>/edit/', views.update_edit, name='update_edit'),
]
