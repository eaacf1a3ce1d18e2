"""
Test suite for realtime updates
Tests: socket authentication, property rooms, broadcast helpers and client reconnection
"""
from unittest.mock import MagicMock, patch
from django.test import TestCase, override_settings
from rest_framework_simplejwt.tokens import AccessToken
from socketio import exceptions as socketio_exceptions
from pgmanager.core.test_utils import TestDataFactory
from pgmanager.realtime import events, server
from pgmanager.realtime.client import RealtimeClient


class ServerConnectionTests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.prop = TestDataFactory.create_property(self.owner, name='Banyan PG')
        self.token = str(AccessToken.for_user(self.owner))
        patcher_room = patch.object(server.sio, 'enter_room')
        patcher_leave = patch.object(server.sio, 'leave_room')
        patcher_emit = patch.object(server.sio, 'emit')
        self.enter_room = patcher_room.start()
        self.leave_room = patcher_leave.start()
        self.emit = patcher_emit.start()
        self.addCleanup(patch.stopall)
        self.addCleanup(server.disconnect, 'sid-1')

    def test_connect_with_auth_token(self):
        server.connect('sid-1', {}, {'token': self.token})
        self.assertEqual(server.connected_users['sid-1']['id'], self.owner.id)
        self.enter_room.assert_called_once_with('sid-1', f'user:{self.owner.id}')

    def test_connect_with_bearer_header(self):
        server.connect('sid-1', {'HTTP_AUTHORIZATION': f'Bearer {self.token}'})
        self.assertIn('sid-1', server.connected_users)

    def test_connect_without_token_refused(self):
        with self.assertRaises(socketio_exceptions.ConnectionRefusedError):
            server.connect('sid-1', {}, None)

    def test_connect_inactive_user_refused(self):
        self.owner.is_active = False
        self.owner.save()
        with self.assertRaises(socketio_exceptions.ConnectionRefusedError):
            server.connect('sid-1', {}, {'token': self.token})

    def test_connect_bad_token_refused(self):
        with self.assertRaises(socketio_exceptions.ConnectionRefusedError):
            server.connect('sid-1', {}, {'token': 'not-a-jwt'})

    def test_join_and_leave_property(self):
        server.connect('sid-1', {}, {'token': self.token})
        server.join_property('sid-1', self.prop.id)
        self.enter_room.assert_called_with('sid-1', f'property:{self.prop.id}')
        self.emit.assert_called_with(events.JOINED_PROPERTY,
                                     {'property_id': self.prop.id, 'property_name': 'Banyan PG'}, to='sid-1')
        self.assertEqual(server.get_property_user_count(self.prop.id), 1)

        server.leave_property('sid-1', str(self.prop.id))
        self.assertEqual(server.get_property_user_count(self.prop.id), 0)

    def test_join_foreign_property_denied(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        server.connect('sid-1', {}, {'token': self.token})
        server.join_property('sid-1', foreign.id)
        self.emit.assert_called_with(events.ERROR, {'message': 'Access denied to property'}, to='sid-1')
        self.assertEqual(server.get_property_user_count(foreign.id), 0)

    def test_subscriptions_require_ownership(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        server.connect('sid-1', {}, {'token': self.token})
        for handler in (server.subscribe_dashboard, server.subscribe_beds, server.subscribe_payments):
            handler('sid-1', foreign.id)
            self.emit.assert_called_with(events.ERROR, {'message': 'Access denied to property'}, to='sid-1')
        self.enter_room.assert_called_once_with('sid-1', f'user:{self.owner.id}')

    def test_subscriptions_for_own_property(self):
        server.connect('sid-1', {}, {'token': self.token})
        server.subscribe_dashboard('sid-1', str(self.prop.id))
        server.subscribe_beds('sid-1', self.prop.id)
        server.subscribe_payments('sid-1', self.prop.id)
        rooms = [call[0][1] for call in self.enter_room.call_args_list[1:]]
        self.assertEqual(rooms, [f'dashboard:{self.prop.id}', f'beds:{self.prop.id}', f'payments:{self.prop.id}'])

    def test_subscription_before_connect(self):
        server.subscribe_beds('sid-1', self.prop.id)
        self.emit.assert_called_once_with(events.ERROR, {'message': 'Not authenticated'}, to='sid-1')

    def test_disconnect_clears_rooms(self):
        server.connect('sid-1', {}, {'token': self.token})
        server.join_property('sid-1', self.prop.id)
        server.disconnect('sid-1', 'client disconnect')
        self.assertNotIn('sid-1', server.connected_users)
        self.assertEqual(server.get_property_user_count(self.prop.id), 0)


class BroadcastTests(TestCase):

    @patch('pgmanager.realtime.server.sio.emit')
    def test_tenant_update_goes_to_property_room(self, mock_emit):
        self.assertTrue(server.broadcast_tenant_update(7, {'id': 1}, events.TENANT_VACATE))
        event, payload = mock_emit.call_args[0]
        self.assertEqual(event, 'tenant-update')
        self.assertEqual(payload['type'], 'vacate')
        self.assertIn('timestamp', payload)
        self.assertEqual(mock_emit.call_args[1]['to'], 'property:7')

    @patch('pgmanager.realtime.server.sio.emit')
    def test_bed_payment_and_dashboard_rooms(self, mock_emit):
        server.broadcast_bed_update(3, {'id': 9})
        server.broadcast_payment_update(3, {'id': 4}, 'paid')
        server.broadcast_dashboard_update(3, {'beds': {}})
        rooms = [call[1]['to'] for call in mock_emit.call_args_list]
        self.assertEqual(rooms, ['beds:3', 'payments:3', 'dashboard:3'])

    @patch('pgmanager.realtime.server.sio.emit')
    def test_emergency_is_critical(self, mock_emit):
        server.emergency_broadcast(2, {'title': 'Fire drill'})
        self.assertEqual(mock_emit.call_args[0][1]['priority'], 'CRITICAL')

    @patch('pgmanager.realtime.server.sio.emit', side_effect=RuntimeError('transport closed'))
    def test_emit_failure_is_swallowed(self, mock_emit):
        self.assertFalse(server.send_notification(5, {'title': 'Rent reminder'}))

    @override_settings(REALTIME_ENABLED=False)
    @patch('pgmanager.realtime.server.sio.emit')
    def test_disabled(self, mock_emit):
        self.assertFalse(server.broadcast_system_notification('Maintenance tonight'))
        mock_emit.assert_not_called()


class FakeTimer:
    created = []

    def __init__(self, delay, function):
        self.delay = delay
        self.function = function
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class RealtimeClientTests(TestCase):

    def setUp(self):
        FakeTimer.created = []
        self.sio = MagicMock()
        self.client = RealtimeClient('http://localhost:8000', token='abc', sio=self.sio,
                                     max_reconnect_attempts=3, reconnect_delay=1.0, timer_factory=FakeTimer)

    def handler_for(self, event):
        for call in self.sio.on.call_args_list:
            if call[0][0] == event:
                return call[0][1]
        raise AssertionError(f'no handler registered for {event}')

    def test_connect_passes_token(self):
        self.assertTrue(self.client.connect())
        self.sio.connect.assert_called_once_with('http://localhost:8000', auth={'token': 'abc'},
                                                 transports=['websocket', 'polling'])

    def test_linear_backoff_then_gives_up(self):
        self.sio.connect.side_effect = socketio_exceptions.ConnectionError('refused')
        failures = []
        self.client.on('reconnect_failed', failures.append)

        self.assertFalse(self.client.connect())
        for _ in range(3):
            FakeTimer.created[-1].fire()

        self.assertEqual([timer.delay for timer in FakeTimer.created], [1.0, 2.0, 3.0])
        self.assertTrue(self.client.gave_up)
        self.assertEqual(failures, [3])

    def test_connect_resets_attempts(self):
        self.sio.connect.side_effect = socketio_exceptions.ConnectionError('refused')
        self.client.connect()
        self.assertEqual(self.client.reconnect_attempts, 1)

        self.sio.connect.side_effect = None
        FakeTimer.created[-1].fire()
        self.handler_for('connect')()
        self.assertTrue(self.client.is_connected)
        self.assertEqual(self.client.reconnect_attempts, 0)

    def test_server_disconnect_reconnects(self):
        self.handler_for('connect')()
        self.handler_for('disconnect')('io server disconnect')
        self.assertFalse(self.client.is_connected)
        self.assertEqual(len(FakeTimer.created), 1)

    def test_client_disconnect_does_not_reconnect(self):
        self.handler_for('connect')()
        self.client.disconnect()
        self.handler_for('disconnect')('client disconnect')
        self.sio.disconnect.assert_called_once()
        self.assertEqual(FakeTimer.created, [])

    def test_dispatch_to_subscribers(self):
        received = []

        def broken(data):
            raise ValueError('subscriber bug')

        self.client.on(events.TENANT_UPDATE, broken)
        unsubscribe = self.client.on(events.TENANT_UPDATE, received.append)
        self.handler_for(events.TENANT_UPDATE)({'type': 'create'})
        self.assertEqual(received, [{'type': 'create'}])

        unsubscribe()
        self.handler_for(events.TENANT_UPDATE)({'type': 'update'})
        self.assertEqual(len(received), 1)

    def test_emit_requires_connection(self):
        self.assertFalse(self.client.join_property(4))
        self.handler_for('connect')()
        self.assertTrue(self.client.join_property(4))
        self.sio.emit.assert_called_once_with(events.JOIN_PROPERTY, 4)
