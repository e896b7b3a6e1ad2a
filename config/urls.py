"""
Main URL configuration for the federation back office.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('competitions/', include('apps.competitions.urls')),
]

# Admin site customization
admin.site.site_header = "Федерация - Админ-панель"
admin.site.site_title = "Federation Admin"
admin.site.index_title = "Управление соревнованиями"
