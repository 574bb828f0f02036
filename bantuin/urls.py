"""
URL configuration for the bantuin project.

Every route lives under /api/ and is declared once in marketplace.urls.
"""
from django.urls import include, path


urlpatterns = [
    path('api/', include('marketplace.urls')),
]
