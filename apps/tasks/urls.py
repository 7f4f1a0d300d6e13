"""
URL configuration for tasks app.
"""

from django.urls import path
from . import views

app_name = 'tasks'

urlpatterns = [
    path('', views.task_list_view, name='task_list'),
    path('batch/', views.batch_delete_view, name='batch_delete'),
    path('batch/status/', views.batch_status_view, name='batch_status'),
    path('<int:pk>/', views.task_detail_view, name='task_detail'),
    path('<int:pk>/status/', views.task_status_view, name='task_status'),
]
