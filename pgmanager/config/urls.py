"""
URL configuration for the PG Manager backend.

Every app's API lives under /api/; uploaded documents are served from /media/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "PG Manager Pro Admin"
admin.site.site_title = "PG Manager Pro Admin Portal"
admin.site.index_title = "Properties, tenants and payments"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('pgmanager.core.urls')),
    path('api/', include('pgmanager.properties.urls')),
    path('api/', include('pgmanager.tenants.urls')),
    path('api/', include('pgmanager.payments.urls')),
    path('api/', include('pgmanager.documents.urls')),
    path('api/', include('pgmanager.dashboard.urls')),
    path('api/', include('pgmanager.preferences.urls')),
    path('api/', include('pgmanager.adminpanel.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
