"""Root URL configuration.

All endpoints live under ``/api/``.
"""

from django.urls import include, path

urlpatterns = [
    path('api/', include('server.apps.accounts.urls')),
    path('api/', include('server.apps.files.urls')),
]
