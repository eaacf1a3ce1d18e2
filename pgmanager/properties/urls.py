from django.urls import path
from .views import (
    property_list_create, property_detail, property_dashboard,
    floor_list_create, floor_detail,
    room_list_create, room_detail, room_beds,
    bed_list_create, bed_detail, bed_assign, bed_unassign
)

urlpatterns = [
    # Property endpoints
    path('properties/', property_list_create, name='property-list-create'),
    path('properties/<int:pk>/', property_detail, name='property-detail'),
    path('properties/<int:pk>/dashboard/', property_dashboard, name='property-dashboard'),

    # Floor endpoints
    path('floors/', floor_list_create, name='floor-list-create'),
    path('floors/<int:pk>/', floor_detail, name='floor-detail'),

    # Room endpoints
    path('rooms/', room_list_create, name='room-list-create'),
    path('rooms/<int:pk>/', room_detail, name='room-detail'),
    path('rooms/<int:pk>/beds/', room_beds, name='room-beds'),

    # Bed endpoints
    path('beds/', bed_list_create, name='bed-list-create'),
    path('beds/<int:pk>/', bed_detail, name='bed-detail'),
    path('beds/<int:pk>/assign/', bed_assign, name='bed-assign'),
    path('beds/<int:pk>/unassign/', bed_unassign, name='bed-unassign'),
]
