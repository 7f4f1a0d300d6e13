"""
URL configuration for reports app.
"""

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('overview/', views.overview_view, name='overview'),
    path('daily/', views.daily_stats_view, name='daily'),
    path('weekly/', views.weekly_stats_view, name='weekly'),
    path('productivity/', views.productivity_stats_view, name='productivity'),
    path('monthly/', views.monthly_report_view, name='monthly'),
]
