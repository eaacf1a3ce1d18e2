"""
Test suite for the REST API client
Tests: envelope handling, errors, GET caching, request sharing and invalidation
"""
import threading
from unittest.mock import MagicMock
from django.test import SimpleTestCase
from pgmanager.client import PGManagerClient, APIError, AuthenticationError


def fake_response(status_code=200, payload=None, content=b''):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = content
    if payload is None:
        response.json.side_effect = ValueError('no json')
    else:
        response.json.return_value = payload
    return response


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class ClientTestMixin:

    def setUp(self):
        self.session = MagicMock()
        self.clock = FakeClock()
        self.client = PGManagerClient('http://pg.local/api/', token='access-1', cache_ttl=30,
                                      session=self.session, clock=self.clock)

    def respond(self, *responses):
        self.session.request.side_effect = list(responses)


class EnvelopeTests(ClientTestMixin, SimpleTestCase):

    def test_unwraps_data_and_sends_token(self):
        self.respond(fake_response(payload={'success': True, 'data': {'id': 3}}))
        self.assertEqual(self.client.get_property(3), {'id': 3})
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ('GET', 'http://pg.local/api/properties/3/'))
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer access-1')
        self.assertEqual(kwargs['timeout'], 10.0)

    def test_error_message_from_envelope(self):
        self.respond(fake_response(409, {'success': False, 'error': {'message': 'Floor 1 already exists'}}))
        with self.assertRaises(APIError) as ctx:
            self.client.create_floor(1, 1, 'First')
        self.assertEqual(ctx.exception.message, 'Floor 1 already exists')
        self.assertEqual(ctx.exception.status_code, 409)

    def test_unauthorized_clears_token(self):
        self.respond(fake_response(401, {'detail': 'Token is invalid or expired'}))
        with self.assertRaises(AuthenticationError):
            self.client.me()
        self.assertIsNone(self.client.token)

    def test_non_json_error(self):
        self.respond(fake_response(502))
        with self.assertRaises(APIError) as ctx:
            self.client.list_tenants()
        self.assertEqual(ctx.exception.message, 'Request failed with status 502')

    def test_login_stores_tokens(self):
        self.client.token = None
        self.respond(fake_response(payload={'success': True, 'data': {
            'user': {'id': 1}, 'access': 'a-2', 'refresh': 'r-2',
        }}))
        self.assertEqual(self.client.login('owner@example.com', 'secret'), {'id': 1})
        self.assertEqual(self.client.token, 'a-2')
        self.assertEqual(self.client.refresh, 'r-2')

    def test_download_returns_bytes(self):
        self.respond(fake_response(payload=None, content=b'%PDF'))
        self.assertEqual(self.client.download_document(8), b'%PDF')


class CacheTests(ClientTestMixin, SimpleTestCase):

    def test_cache_key_normalization(self):
        self.assertEqual(PGManagerClient.cache_key('tenants'), '/tenants/')
        self.assertEqual(PGManagerClient.cache_key('/tenants/', {'status': 'ACTIVE', 'page': 2, 'search': None}),
                         '/tenants/?page=2&status=ACTIVE')

    def test_get_cached_until_ttl(self):
        self.respond(fake_response(payload={'data': [1]}), fake_response(payload={'data': [2]}))
        self.assertEqual(self.client.list_properties(), [1])
        self.assertEqual(self.client.list_properties(), [1])
        self.assertEqual(self.session.request.call_count, 1)

        self.clock.now += 31
        self.assertEqual(self.client.list_properties(), [2])

    def test_mutation_invalidates_resource_and_dashboard(self):
        self.respond(
            fake_response(payload={'data': ['tenants']}),
            fake_response(payload={'data': {'stats': 1}}),
            fake_response(payload={'data': ['properties']}),
            fake_response(payload={'data': {'id': 9}}),
        )
        self.client.list_tenants()
        self.client.dashboard_stats()
        self.client.list_properties()
        self.client.create_tenant(full_name='Arjun')

        self.assertEqual(self.client._cache, {})

    def test_unrelated_cache_survives(self):
        self.respond(
            fake_response(payload={'data': {'theme': 'dark'}}),
            fake_response(payload={'data': {'id': 4}}),
        )
        self.client.user_settings()
        self.client.create_notice(1, 'Water supply', 'No water from 10 to 12')
        self.assertIn('/settings/user/', self.client._cache)

    def test_generate_payments_drops_payment_cache(self):
        self.respond(
            fake_response(payload={'data': ['old']}),
            fake_response(payload={'data': {'created': 2, 'skipped': 0}}),
        )
        self.client.list_payments(month='2024-05')
        result = self.client.generate_payments(4, '2024-05-05', amount=7500, tenant_ids=[1, 2])
        self.assertEqual(result['created'], 2)
        self.assertEqual(self.client._cache, {})
        body = self.session.request.call_args[1]['json']
        self.assertEqual(body, {'property_id': 4, 'due_date': '2024-05-05', 'payment_type': 'RENT',
                                'amount': '7500', 'tenant_ids': [1, 2]})

    def test_reset_settings_drops_settings_cache(self):
        self.respond(
            fake_response(payload={'data': {'theme': 'dark'}}),
            fake_response(payload={'data': {'user_settings': {'theme': 'light'}}}),
        )
        self.client.user_settings()
        self.client.reset_settings('user')
        self.assertNotIn('/settings/user/', self.client._cache)

    def test_failed_get_is_not_cached(self):
        self.respond(fake_response(500), fake_response(payload={'data': 'ok'}))
        with self.assertRaises(APIError):
            self.client.get('rooms/')
        self.assertEqual(self.client.get('rooms/'), 'ok')

    def test_concurrent_gets_share_one_request(self):
        release = threading.Event()
        started = threading.Event()

        def slow_request(*args, **kwargs):
            started.set()
            release.wait(5)
            return fake_response(payload={'data': 'beds'})

        self.session.request.side_effect = slow_request
        results = []
        leader = threading.Thread(target=lambda: results.append(self.client.get('beds/')))
        leader.start()
        started.wait(5)
        follower = threading.Thread(target=lambda: results.append(self.client.get('beds/')))
        follower.start()
        release.set()
        leader.join(5)
        follower.join(5)

        self.assertEqual(results, ['beds', 'beds'])
        self.assertEqual(self.session.request.call_count, 1)
