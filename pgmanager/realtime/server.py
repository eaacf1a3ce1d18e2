"""
Socket.IO server that pushes live property updates to dashboard clients.

Clients authenticate with the same JWT access token used for the REST API
and join per-property rooms. Views call the broadcast_* helpers after a
successful write; a broadcast failure is logged and never propagates.
"""
import json
import logging
import threading

import socketio
from socketio import exceptions as socketio_exceptions
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import AccessToken

from . import events

logger = logging.getLogger('pgmanager.realtime')


class DjangoJSON:
    """json module stand-in so payloads may carry Decimal and datetime values"""

    @staticmethod
    def dumps(obj, **kwargs):
        kwargs.setdefault('cls', DjangoJSONEncoder)
        return json.dumps(obj, **kwargs)

    @staticmethod
    def loads(s, **kwargs):
        return json.loads(s, **kwargs)


sio = socketio.Server(
    async_mode='threading',
    cors_allowed_origins=getattr(settings, 'SOCKETIO_CORS_ALLOWED_ORIGINS', []),
    json=DjangoJSON,
)

_lock = threading.Lock()
connected_users = {}  # sid -> {'id', 'email', 'full_name'}
property_rooms = {}  # property_id -> set of sids


def _now():
    return timezone.now().isoformat()


def _normalize_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def _bearer_token(environ):
    header = environ.get('HTTP_AUTHORIZATION', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):]
    return None


def authenticate_token(token):
    """Return the active user behind a JWT access token, or None"""
    try:
        access = AccessToken(token)
    except TokenError as e:
        logger.warning(f"Socket authentication failed: {e}")
        return None
    user_id = access.get(jwt_settings.USER_ID_CLAIM)
    User = get_user_model()
    return User.objects.filter(pk=user_id, is_active=True).first()


@sio.event
def connect(sid, environ, auth=None):
    token = (auth or {}).get('token') or _bearer_token(environ)
    if not token:
        raise socketio_exceptions.ConnectionRefusedError('Authentication token required')

    user = authenticate_token(token)
    if user is None:
        raise socketio_exceptions.ConnectionRefusedError('Invalid or inactive user')

    with _lock:
        connected_users[sid] = {'id': user.id, 'email': user.email, 'full_name': user.full_name}
    sio.enter_room(sid, events.user_room(user.id))
    logger.info(f"User {user.email} connected ({sid})")


@sio.event
def disconnect(sid, reason=None):
    with _lock:
        user = connected_users.pop(sid, None)
        for property_id in list(property_rooms):
            property_rooms[property_id].discard(sid)
            if not property_rooms[property_id]:
                del property_rooms[property_id]
    if user:
        logger.info(f"User {user['email']} disconnected ({reason})")


def _owned_property(sid, property_id):
    """Property of the socket's user, or None after sending an error to the socket"""
    from pgmanager.properties.models import Property

    user = connected_users.get(sid)
    if user is None:
        sio.emit(events.ERROR, {'message': 'Not authenticated'}, to=sid)
        return None
    try:
        prop = Property.objects.filter(pk=property_id, owner_id=user['id']).first()
    except (TypeError, ValueError):
        prop = None
    if prop is None:
        sio.emit(events.ERROR, {'message': 'Access denied to property'}, to=sid)
    return prop


@sio.on(events.JOIN_PROPERTY)
def join_property(sid, property_id):
    prop = _owned_property(sid, property_id)
    if prop is None:
        return
    user = connected_users[sid]
    sio.enter_room(sid, events.property_room(prop.id))
    with _lock:
        property_rooms.setdefault(prop.id, set()).add(sid)
    sio.emit(events.JOINED_PROPERTY, {'property_id': prop.id, 'property_name': prop.name}, to=sid)
    logger.info(f"User {user['email']} joined property {prop.name}")


@sio.on(events.LEAVE_PROPERTY)
def leave_property(sid, property_id):
    sio.leave_room(sid, events.property_room(property_id))
    key = _normalize_id(property_id)
    with _lock:
        sids = property_rooms.get(key)
        if sids is not None:
            sids.discard(sid)
            if not sids:
                del property_rooms[key]
    sio.emit(events.LEFT_PROPERTY, {'property_id': property_id}, to=sid)


@sio.on(events.SUBSCRIBE_DASHBOARD)
def subscribe_dashboard(sid, property_id):
    prop = _owned_property(sid, property_id)
    if prop is None:
        return
    sio.enter_room(sid, events.dashboard_room(prop.id))
    logger.debug(f"{sid} subscribed to dashboard updates for property {property_id}")


@sio.on(events.SUBSCRIBE_BEDS)
def subscribe_beds(sid, property_id):
    prop = _owned_property(sid, property_id)
    if prop is None:
        return
    sio.enter_room(sid, events.beds_room(prop.id))
    logger.debug(f"{sid} subscribed to bed updates for property {property_id}")


@sio.on(events.SUBSCRIBE_PAYMENTS)
def subscribe_payments(sid, property_id):
    prop = _owned_property(sid, property_id)
    if prop is None:
        return
    sio.enter_room(sid, events.payments_room(prop.id))
    logger.debug(f"{sid} subscribed to payment updates for property {property_id}")


# --- Broadcast helpers ---

def _emit(event, payload, room=None):
    if not getattr(settings, 'REALTIME_ENABLED', True):
        return False
    try:
        sio.emit(event, payload, to=room)
        return True
    except Exception as e:
        logger.warning(f"Failed to emit {event} to {room or 'all'}: {e}")
        return False


def broadcast_dashboard_update(property_id, data):
    return _emit(events.DASHBOARD_UPDATE, {
        'type': 'stats',
        'data': data,
        'timestamp': _now(),
    }, events.dashboard_room(property_id))


def broadcast_bed_update(property_id, bed_data):
    return _emit(events.BED_UPDATE, {
        'type': 'bed-status-change',
        'data': bed_data,
        'timestamp': _now(),
    }, events.beds_room(property_id))


def broadcast_tenant_update(property_id, tenant_data, action=events.TENANT_UPDATE_TYPE):
    return _emit(events.TENANT_UPDATE, {
        'type': action,
        'data': tenant_data,
        'timestamp': _now(),
    }, events.property_room(property_id))


def broadcast_payment_update(property_id, payment_data, action='update'):
    return _emit(events.PAYMENT_UPDATE, {
        'type': action,
        'data': payment_data,
        'timestamp': _now(),
    }, events.payments_room(property_id))


def broadcast_activity(property_id, activity):
    payload = dict(activity)
    payload['timestamp'] = _now()
    return _emit(events.NEW_ACTIVITY, payload, events.property_room(property_id))


def send_notification(user_id, notification):
    payload = dict(notification)
    payload['timestamp'] = _now()
    return _emit(events.NOTIFICATION, payload, events.user_room(user_id))


def broadcast_system_notification(message, type='info'):
    return _emit(events.SYSTEM_NOTIFICATION, {
        'type': type,
        'message': message,
        'timestamp': _now(),
    })


def emergency_broadcast(property_id, alert):
    payload = dict(alert)
    payload['priority'] = 'CRITICAL'
    payload['timestamp'] = _now()
    return _emit(events.EMERGENCY_ALERT, payload, events.property_room(property_id))


def get_property_user_count(property_id):
    return len(property_rooms.get(_normalize_id(property_id), ()))


def get_connected_users():
    return list(connected_users.values())
