from django.contrib import admin
from .models import Property, Floor, Room, Bed


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'city', 'total_floors', 'total_rooms', 'total_beds', 'is_active', 'created_at']
    list_filter = ['is_active', 'city', 'state', 'created_at']
    search_fields = ['name', 'city', 'address', 'owner__email']
    ordering = ['-created_at']


@admin.register(Floor)
class FloorAdmin(admin.ModelAdmin):
    list_display = ['name', 'property', 'floor_number', 'created_at']
    list_filter = ['property']
    search_fields = ['name', 'property__name']
    ordering = ['property', 'floor_number']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['room_number', 'floor', 'type', 'capacity', 'status', 'rent']
    list_filter = ['type', 'status', 'floor__property']
    search_fields = ['room_number', 'name', 'floor__property__name']


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ['bed_number', 'room', 'bed_type', 'status', 'rent']
    list_filter = ['status', 'bed_type', 'room__floor__property']
    search_fields = ['bed_number', 'room__room_number']
