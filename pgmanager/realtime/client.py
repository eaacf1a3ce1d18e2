"""
Socket.IO client for consuming live updates from the PG Manager server.

Reconnection is handled here instead of by python-socketio: the delay grows
linearly with each attempt (reconnect_delay * attempt) and gives up after
max_reconnect_attempts. A disconnect initiated by the client never triggers
a reconnect; one initiated by the server does.
"""
import logging
import threading
from collections import defaultdict

import socketio
from socketio import exceptions as socketio_exceptions

from . import events

logger = logging.getLogger('pgmanager.realtime.client')

SERVER_DISCONNECT_REASONS = ('io server disconnect', 'server disconnect')


class RealtimeClient:
    """Connects to the realtime server and re-dispatches events to subscribers"""

    def __init__(self, url, token=None, max_reconnect_attempts=5, reconnect_delay=1.0,
                 sio=None, timer_factory=threading.Timer):
        self.url = url
        self.token = token
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self.reconnect_attempts = 0
        self.is_connected = False
        self.gave_up = False
        self._timer_factory = timer_factory
        self._reconnect_timer = None
        self._manual_disconnect = False
        self._lock = threading.Lock()
        self._subscribers = defaultdict(list)

        self.sio = sio or socketio.Client(reconnection=False)
        self.sio.on('connect', self._on_connect)
        self.sio.on('disconnect', self._on_disconnect)
        self.sio.on('connect_error', self._on_connect_error)
        for event in events.SERVER_EVENTS:
            self.sio.on(event, self._make_dispatcher(event))

    # --- Connection lifecycle ---

    def connect(self, token=None):
        """Open the connection; failures schedule a reconnect"""
        if token is not None:
            self.token = token
        self._manual_disconnect = False
        auth = {'token': self.token} if self.token else None
        try:
            self.sio.connect(self.url, auth=auth, transports=['websocket', 'polling'])
            return True
        except socketio_exceptions.ConnectionError as e:
            logger.warning(f"Realtime connection to {self.url} failed: {e}")
            self._schedule_reconnect()
            return False

    def disconnect(self):
        """Close the connection without reconnecting"""
        self._manual_disconnect = True
        self._cancel_reconnect()
        if self.is_connected:
            self.sio.disconnect()
        self.is_connected = False

    def _on_connect(self):
        with self._lock:
            self.is_connected = True
            self.reconnect_attempts = 0
            self.gave_up = False
            self._reconnect_timer = None
        logger.info(f"Connected to realtime server {self.url}")
        self._dispatch('connect', None)

    def _on_disconnect(self, reason=None):
        self.is_connected = False
        logger.info(f"Disconnected from realtime server ({reason})")
        self._dispatch('disconnect', reason)
        if not self._manual_disconnect and reason in SERVER_DISCONNECT_REASONS:
            self._schedule_reconnect()

    def _on_connect_error(self, data=None):
        logger.warning(f"Realtime connection error: {data}")
        self._dispatch('connect_error', data)
        self._schedule_reconnect()

    def _schedule_reconnect(self):
        with self._lock:
            if self._reconnect_timer is not None:
                return
            exhausted = self.reconnect_attempts >= self.max_reconnect_attempts
            if exhausted:
                newly_exhausted = not self.gave_up
                self.gave_up = True
            else:
                self._start_reconnect_timer()
        if exhausted and newly_exhausted:
            logger.error(f"Max reconnection attempts ({self.max_reconnect_attempts}) reached")
            self._dispatch('reconnect_failed', self.reconnect_attempts)

    def _start_reconnect_timer(self):
        self.reconnect_attempts += 1
        delay = self.reconnect_delay * self.reconnect_attempts
        logger.info(f"Reconnecting in {delay}s (attempt {self.reconnect_attempts}/{self.max_reconnect_attempts})")
        self._reconnect_timer = self._timer_factory(delay, self._reconnect)
        self._reconnect_timer.daemon = True
        self._reconnect_timer.start()

    def _reconnect(self):
        with self._lock:
            self._reconnect_timer = None
        if self._manual_disconnect:
            return
        self.connect()

    def _cancel_reconnect(self):
        with self._lock:
            if self._reconnect_timer is not None:
                self._reconnect_timer.cancel()
                self._reconnect_timer = None

    # --- Subscriptions ---

    def on(self, event, callback):
        """Register a callback for a server event; returns an unsubscribe function"""
        self._subscribers[event].append(callback)

        def unsubscribe():
            if callback in self._subscribers[event]:
                self._subscribers[event].remove(callback)
        return unsubscribe

    def _make_dispatcher(self, event):
        def handler(data=None):
            self._dispatch(event, data)
        return handler

    def _dispatch(self, event, data):
        for callback in list(self._subscribers.get(event, ())):
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Subscriber for {event} failed: {e}", exc_info=True)

    # --- Client -> server ---

    def emit(self, event, data=None):
        if not self.is_connected:
            logger.warning(f"Cannot emit {event}: not connected")
            return False
        self.sio.emit(event, data)
        return True

    def join_property(self, property_id):
        return self.emit(events.JOIN_PROPERTY, property_id)

    def leave_property(self, property_id):
        return self.emit(events.LEAVE_PROPERTY, property_id)

    def subscribe_dashboard(self, property_id):
        return self.emit(events.SUBSCRIBE_DASHBOARD, property_id)

    def subscribe_beds(self, property_id):
        return self.emit(events.SUBSCRIBE_BEDS, property_id)

    def subscribe_payments(self, property_id):
        return self.emit(events.SUBSCRIBE_PAYMENTS, property_id)
