"""
URL configuration for categories.
"""

from django.urls import path
from . import category_views

app_name = 'categories'

urlpatterns = [
    path('', category_views.category_list_view, name='category_list'),
    path('<int:pk>/', category_views.category_detail_view, name='category_detail'),
    path('<int:pk>/stats/', category_views.category_stats_view, name='category_stats'),
]
