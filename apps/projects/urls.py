"""
URL configuration for projects app.
"""

from django.urls import path
from . import views

app_name = 'projects'

urlpatterns = [
    path('', views.project_list_view, name='project_list'),
    path('<int:pk>/', views.project_detail_view, name='project_detail'),
    path('<int:pk>/tasks/', views.project_tasks_view, name='project_tasks'),
    path('<int:pk>/stats/', views.project_stats_view, name='project_stats'),
]
