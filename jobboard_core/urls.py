from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from .admin_views import AdminSystemStatsView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/admin/stats/', AdminSystemStatsView.as_view(), name='admin-stats'),
    path('api/users/', include('users.urls')),
    path('api/projects/', include('projects.urls')),
    path('api/finance/', include('finance.urls')),
    path('api/contracts/', include('contracts.urls')),
    path('api/disputes/', include('disputes.urls')),
    path('api/notifications/', include('notifications.urls')),
]

# Enable media handling in development (profile images)
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
