from django.conf import settings
from django.db import models


class Property(models.Model):
    """PG property owned by a user"""
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='properties')
    name = models.CharField(max_length=200)
    address = models.TextField()
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    pincode = models.CharField(max_length=10)
    description = models.TextField(blank=True)
    # Declared capacity; 0 means the limit is not configured
    total_floors = models.PositiveIntegerField(default=0)
    total_rooms = models.PositiveIntegerField(default=0)
    total_beds = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'properties'
        ordering = ['-created_at']
        verbose_name_plural = 'properties'


class Floor(models.Model):
    """Floor inside a property"""
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name='floors')
    name = models.CharField(max_length=100)
    floor_number = models.IntegerField()
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.property.name} - {self.name}"

    class Meta:
        db_table = 'floors'
        ordering = ['floor_number']
        constraints = [
            models.UniqueConstraint(fields=['property', 'floor_number'], name='unique_floor_number_per_property'),
        ]


class Room(models.Model):
    """Room on a floor; capacity is the maximum number of beds"""
    TYPE_CHOICES = [
        ('SINGLE', 'Single'),
        ('SHARED', 'Shared'),
        ('DORMITORY', 'Dormitory'),
    ]

    STATUS_CHOICES = [
        ('AVAILABLE', 'Available'),
        ('OCCUPIED', 'Occupied'),
        ('MAINTENANCE', 'Maintenance'),
    ]

    MIN_CAPACITY = 1
    MAX_CAPACITY = 12

    floor = models.ForeignKey(Floor, on_delete=models.CASCADE, related_name='rooms')
    room_number = models.CharField(max_length=20)
    name = models.CharField(max_length=100, blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='SHARED')
    capacity = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='AVAILABLE')
    rent = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    deposit = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    amenities = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Room {self.room_number}"

    class Meta:
        db_table = 'rooms'
        ordering = ['floor__floor_number', 'room_number']
        constraints = [
            models.UniqueConstraint(fields=['floor', 'room_number'], name='unique_room_number_per_floor'),
        ]


class Bed(models.Model):
    """Bed inside a room; holds at most one tenant"""
    TYPE_CHOICES = [
        ('SINGLE', 'Single'),
        ('DOUBLE', 'Double'),
        ('BUNK', 'Bunk'),
    ]

    STATUS_CHOICES = [
        ('AVAILABLE', 'Available'),
        ('OCCUPIED', 'Occupied'),
        ('BLOCKED', 'Blocked'),
        ('MAINTENANCE', 'Maintenance'),
    ]

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='beds')
    bed_number = models.CharField(max_length=20)
    bed_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='SINGLE')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='AVAILABLE')
    rent = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    deposit = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def property_id(self):
        return self.room.floor.property_id

    @property
    def location(self):
        return f"{self.room.floor.name} - Room {self.room.room_number} - Bed {self.bed_number}"

    def __str__(self):
        return f"Bed {self.bed_number} ({self.room})"

    class Meta:
        db_table = 'beds'
        ordering = ['room__room_number', 'bed_number']
        constraints = [
            models.UniqueConstraint(fields=['room', 'bed_number'], name='unique_bed_number_per_room'),
        ]
