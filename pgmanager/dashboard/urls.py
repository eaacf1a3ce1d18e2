from django.urls import path
from .views import dashboard_stats, dashboard_activities, occupancy_trends, revenue_trends, dashboard_user_settings

urlpatterns = [
    path('dashboard/stats/', dashboard_stats, name='dashboard-stats'),
    path('dashboard/activities/', dashboard_activities, name='dashboard-activities'),
    path('dashboard/occupancy-trends/', occupancy_trends, name='dashboard-occupancy-trends'),
    path('dashboard/revenue-trends/', revenue_trends, name='dashboard-revenue-trends'),
    path('dashboard/user-settings/', dashboard_user_settings, name='dashboard-user-settings'),
]
