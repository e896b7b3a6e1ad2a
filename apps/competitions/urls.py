"""
Competitions app URLs.
"""

from django.urls import path

from . import views

urlpatterns = [
    path('<int:competition_id>/categories/', views.category_list, name='competition_category_list'),
    path('<int:competition_id>/categories/generate/', views.category_generate, name='competition_category_generate'),
    path('<int:competition_id>/categories/clear/', views.category_clear, name='competition_category_clear'),
    path('<int:competition_id>/categories/stats/', views.category_stats, name='competition_category_stats'),
]
