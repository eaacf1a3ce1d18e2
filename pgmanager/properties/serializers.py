from rest_framework import serializers
from .models import Property, Floor, Room, Bed


def upper_choice(data, field):
    """Accept choice values in any case ('Single', 'single', 'SINGLE')"""
    value = data.get(field)
    if isinstance(value, str) and value != value.upper():
        data = data.copy()
        data[field] = value.upper()
    return data


class PropertySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = ['id', 'owner', 'name', 'address', 'city', 'state', 'pincode', 'description',
                  'total_floors', 'total_rooms', 'total_beds', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['owner', 'created_at', 'updated_at']


class BedTenantSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    tenant_id = serializers.CharField()
    full_name = serializers.CharField()
    phone = serializers.CharField()
    status = serializers.CharField()


class BedSerializer(serializers.ModelSerializer):
    tenant = serializers.SerializerMethodField()
    room_number = serializers.CharField(source='room.room_number', read_only=True)

    class Meta:
        model = Bed
        fields = ['id', 'room', 'room_number', 'bed_number', 'bed_type', 'status', 'rent', 'deposit',
                  'description', 'tenant', 'created_at', 'updated_at']
        read_only_fields = ['status', 'created_at', 'updated_at']
        # Uniqueness is checked in the views so duplicates answer 409
        validators = []

    def get_tenant(self, obj):
        tenant = getattr(obj, 'tenant', None)
        if tenant is None:
            return None
        return BedTenantSerializer(tenant).data

    def to_internal_value(self, data):
        return super().to_internal_value(upper_choice(data, 'bed_type'))


class RoomSerializer(serializers.ModelSerializer):
    beds = BedSerializer(many=True, read_only=True)
    bed_count = serializers.SerializerMethodField()
    occupied_beds = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = ['id', 'floor', 'room_number', 'name', 'type', 'capacity', 'status', 'rent', 'deposit',
                  'amenities', 'description', 'beds', 'bed_count', 'occupied_beds', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []

    def get_bed_count(self, obj):
        return len(obj.beds.all())

    def get_occupied_beds(self, obj):
        return sum(1 for bed in obj.beds.all() if bed.status == 'OCCUPIED')

    def to_internal_value(self, data):
        return super().to_internal_value(upper_choice(data, 'type'))

    def validate_capacity(self, value):
        if value < Room.MIN_CAPACITY or value > Room.MAX_CAPACITY:
            raise serializers.ValidationError(
                f'Room capacity must be between {Room.MIN_CAPACITY} and {Room.MAX_CAPACITY} beds'
            )
        return value


class FloorSerializer(serializers.ModelSerializer):
    rooms = RoomSerializer(many=True, read_only=True)

    class Meta:
        model = Floor
        fields = ['id', 'property', 'name', 'floor_number', 'description', 'rooms', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []
