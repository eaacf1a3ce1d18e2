"""Socket.IO event and room names shared by the server and the client"""

# Server -> client
DASHBOARD_UPDATE = 'dashboard-update'
BED_UPDATE = 'bed-update'
TENANT_UPDATE = 'tenant-update'
PAYMENT_UPDATE = 'payment-update'
NOTIFICATION = 'notification'
NEW_ACTIVITY = 'new-activity'
SYSTEM_NOTIFICATION = 'system-notification'
EMERGENCY_ALERT = 'emergency-alert'
JOINED_PROPERTY = 'joined-property'
LEFT_PROPERTY = 'left-property'
ERROR = 'error'

SERVER_EVENTS = (
    DASHBOARD_UPDATE, BED_UPDATE, TENANT_UPDATE, PAYMENT_UPDATE, NOTIFICATION,
    NEW_ACTIVITY, SYSTEM_NOTIFICATION, EMERGENCY_ALERT, JOINED_PROPERTY,
    LEFT_PROPERTY, ERROR,
)

# Client -> server
JOIN_PROPERTY = 'join-property'
LEAVE_PROPERTY = 'leave-property'
SUBSCRIBE_DASHBOARD = 'subscribe-dashboard'
SUBSCRIBE_BEDS = 'subscribe-beds'
SUBSCRIBE_PAYMENTS = 'subscribe-payments'

# tenant-update types
TENANT_CREATE = 'create'
TENANT_UPDATE_TYPE = 'update'
TENANT_DELETE = 'delete'
TENANT_VACATE = 'vacate'


def property_room(property_id):
    return f'property:{property_id}'


def dashboard_room(property_id):
    return f'dashboard:{property_id}'


def beds_room(property_id):
    return f'beds:{property_id}'


def payments_room(property_id):
    return f'payments:{property_id}'


def user_room(user_id):
    return f'user:{user_id}'
