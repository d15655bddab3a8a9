"""URL configuration for the sports_portal project."""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('schools.urls')),
    path('api/', include('roster.urls')),
    path('api/', include('achievements.urls')),
    path('api/', include('competitions.urls')),
]
