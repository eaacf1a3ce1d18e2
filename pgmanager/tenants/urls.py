from django.urls import path
from .views import tenant_list_create, tenant_detail, tenant_assign_bed, tenant_vacate

urlpatterns = [
    path('tenants/', tenant_list_create, name='tenant-list-create'),
    path('tenants/<int:pk>/', tenant_detail, name='tenant-detail'),
    path('tenants/<int:pk>/assign-bed/', tenant_assign_bed, name='tenant-assign-bed'),
    path('tenants/<int:pk>/vacate/', tenant_vacate, name='tenant-vacate'),
]
