"""URL configuration for ReCore.

Only the Django admin is exposed over HTTP; reservations are managed
there through the lifecycle engine.
"""
from django.contrib import admin  # type: ignore
from django.urls import path  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
]
