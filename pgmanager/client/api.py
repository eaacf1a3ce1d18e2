"""
HTTP client for the PG Manager REST API.

GET responses are cached in memory for cache_ttl seconds and concurrent GETs
for the same URL share one request. Any mutating call drops the cached
entries of the resource it touched (and the dashboard aggregates).
"""
import logging
import threading
import time
from typing import Dict, Optional
from urllib.parse import urlencode

import requests

logger = logging.getLogger('pgmanager.client')


class APIError(Exception):
    """Non-2xx response from the API"""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class AuthenticationError(APIError):
    """401 from the API; the stored token has been cleared"""


class _InFlight:
    def __init__(self):
        self.event = threading.Event()
        self.result = None
        self.error = None


class PGManagerClient:
    """Wrapper around requests.Session speaking the {"success", "data"} envelope"""

    def __init__(self, base_url: str, token: Optional[str] = None, cache_ttl: float = 30.0,
                 timeout: float = 10.0, session: Optional[requests.Session] = None, clock=time.monotonic):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.refresh = None
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.session = session or requests.Session()
        self._clock = clock
        self._cache: Dict[str, tuple] = {}
        self._in_flight: Dict[str, _InFlight] = {}
        self._lock = threading.Lock()

    # --- Transport ---

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self):
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    @staticmethod
    def cache_key(path, params=None):
        path = '/' + path.strip('/') + '/'
        if not params:
            return path
        clean = sorted((key, value) for key, value in params.items() if value is not None)
        return f"{path}?{urlencode(clean)}" if clean else path

    def _handle(self, response, raw=False):
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code == 401:
            self.token = None
            raise AuthenticationError(self._error_message(payload, 'Authentication required'), 401, payload)
        if not response.ok:
            message = self._error_message(payload, f"Request failed with status {response.status_code}")
            raise APIError(message, response.status_code, payload)

        if raw:
            return response.content
        if isinstance(payload, dict) and 'data' in payload:
            return payload['data']
        return payload

    @staticmethod
    def _error_message(payload, default):
        if isinstance(payload, dict):
            error = payload.get('error')
            if isinstance(error, dict) and error.get('message'):
                return error['message']
            if payload.get('detail'):
                return str(payload['detail'])
        return default

    def request(self, method, path, params=None, json=None, data=None, files=None, raw=False):
        """Send a request without touching the cache"""
        logger.debug(f"{method} {path} params={params}")
        response = self.session.request(
            method, self._url(path), params=params, json=json, data=data, files=files,
            headers=self._headers(), timeout=self.timeout,
        )
        return self._handle(response, raw=raw)

    # --- Cache ---

    def get(self, path, params=None, use_cache=True):
        """Cached GET; callers waiting on an in-flight request share its result"""
        if not use_cache:
            return self.request('GET', path, params=params)

        key = self.cache_key(path, params)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None and cached[0] > self._clock():
                return cached[1]
            pending = self._in_flight.get(key)
            leader = pending is None
            if leader:
                pending = _InFlight()
                self._in_flight[key] = pending

        if not leader:
            pending.event.wait()
            if pending.error is not None:
                raise pending.error
            return pending.result

        try:
            result = self.request('GET', path, params=params)
            with self._lock:
                self._cache[key] = (self._clock() + self.cache_ttl, result)
            pending.result = result
            return result
        except Exception as e:
            pending.error = e
            raise
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            pending.event.set()

    def invalidate(self, prefix=None):
        """Drop cached GETs whose path starts with /prefix/ (all of them when prefix is None)"""
        with self._lock:
            if prefix is None:
                self._cache.clear()
                return
            start = '/' + prefix.strip('/') + '/'
            for key in [key for key in self._cache if key.startswith(start)]:
                del self._cache[key]

    def _mutate(self, method, path, **kwargs):
        result = self.request(method, path, **kwargs)
        resource = path.strip('/').split('/')[0]
        self.invalidate(resource)
        self.invalidate('dashboard')
        if resource in ('floors', 'rooms', 'beds', 'tenants', 'payments'):
            self.invalidate('properties')
        return result

    def post(self, path, json=None, **kwargs):
        return self._mutate('POST', path, json=json, **kwargs)

    def put(self, path, json=None, **kwargs):
        return self._mutate('PUT', path, json=json, **kwargs)

    def delete(self, path, json=None, **kwargs):
        return self._mutate('DELETE', path, json=json, **kwargs)

    # --- Auth ---

    def register(self, email, password, full_name, phone, role='OWNER'):
        data = self.request('POST', 'auth/register/', json={
            'email': email, 'password': password, 'full_name': full_name, 'phone': phone, 'role': role,
        })
        self.token, self.refresh = data['access'], data['refresh']
        return data['user']

    def login(self, email, password):
        data = self.request('POST', 'auth/login/', json={'email': email, 'password': password})
        self.token, self.refresh = data['access'], data['refresh']
        self.invalidate()
        return data['user']

    def refresh_token(self):
        if not self.refresh:
            raise AuthenticationError('No refresh token available', 401)
        data = self.request('POST', 'auth/refresh/', json={'refresh': self.refresh})
        self.token = data['access']
        if data.get('refresh'):
            self.refresh = data['refresh']
        return self.token

    def logout(self):
        try:
            self.request('POST', 'auth/logout/')
        finally:
            self.token = None
            self.refresh = None
            self.invalidate()

    def me(self):
        return self.get('auth/me/')

    def update_profile(self, **fields):
        return self.put('auth/profile/', json=fields)

    def change_password(self, current_password, new_password):
        return self.request('POST', 'auth/change-password/', json={
            'current_password': current_password, 'new_password': new_password,
        })

    # --- Properties ---

    def list_properties(self, **params):
        return self.get('properties/', params)

    def get_property(self, property_id):
        return self.get(f'properties/{property_id}/')

    def create_property(self, **fields):
        return self.post('properties/', json=fields)

    def update_property(self, property_id, **fields):
        return self.put(f'properties/{property_id}/', json=fields)

    def delete_property(self, property_id):
        return self.delete(f'properties/{property_id}/')

    def property_dashboard(self, property_id):
        return self.get(f'properties/{property_id}/dashboard/')

    # --- Floors ---

    def list_floors(self, property_id):
        return self.get('floors/', {'property_id': property_id})

    def get_floor(self, floor_id):
        return self.get(f'floors/{floor_id}/')

    def create_floor(self, property_id, floor_number, name, **fields):
        return self.post('floors/', json={'property_id': property_id, 'floor_number': floor_number,
                                          'name': name, **fields})

    def update_floor(self, floor_id, **fields):
        return self.put(f'floors/{floor_id}/', json=fields)

    def delete_floor(self, floor_id):
        return self.delete(f'floors/{floor_id}/')

    # --- Rooms ---

    def list_rooms(self, **params):
        return self.get('rooms/', params)

    def get_room(self, room_id):
        return self.get(f'rooms/{room_id}/')

    def room_beds(self, room_id):
        return self.get(f'rooms/{room_id}/beds/')

    def create_room(self, floor_id, room_number, capacity, type='SHARED', **fields):
        return self.post('rooms/', json={'floor_id': floor_id, 'room_number': room_number,
                                         'capacity': capacity, 'type': type, **fields})

    def update_room(self, room_id, **fields):
        return self.put(f'rooms/{room_id}/', json=fields)

    def delete_room(self, room_id, force_delete=False):
        return self.delete(f'rooms/{room_id}/', json={'force_delete': force_delete})

    # --- Beds ---

    def list_beds(self, **params):
        return self.get('beds/', params)

    def get_bed(self, bed_id):
        return self.get(f'beds/{bed_id}/')

    def create_bed(self, room_id, bed_number, bed_type='SINGLE', **fields):
        return self.post('beds/', json={'room_id': room_id, 'bed_number': bed_number,
                                        'bed_type': bed_type, **fields})

    def update_bed(self, bed_id, **fields):
        return self.put(f'beds/{bed_id}/', json=fields)

    def delete_bed(self, bed_id, relocate_tenant_to_bed_id=None, force_delete=False):
        body = {'force_delete': force_delete}
        if relocate_tenant_to_bed_id is not None:
            body['relocate_tenant_to_bed_id'] = relocate_tenant_to_bed_id
        return self.delete(f'beds/{bed_id}/', json=body)

    def assign_bed(self, bed_id, tenant_id):
        result = self.put(f'beds/{bed_id}/assign/', json={'tenant_id': tenant_id})
        self.invalidate('tenants')
        return result

    def unassign_bed(self, bed_id):
        result = self.put(f'beds/{bed_id}/unassign/')
        self.invalidate('tenants')
        return result

    # --- Tenants ---

    def list_tenants(self, **params):
        return self.get('tenants/', params)

    def get_tenant(self, tenant_id):
        return self.get(f'tenants/{tenant_id}/')

    def create_tenant(self, **fields):
        result = self.post('tenants/', json=fields)
        self.invalidate('beds')
        return result

    def update_tenant(self, tenant_id, **fields):
        return self.put(f'tenants/{tenant_id}/', json=fields)

    def delete_tenant(self, tenant_id):
        result = self.delete(f'tenants/{tenant_id}/')
        self.invalidate('beds')
        return result

    def tenant_assign_bed(self, tenant_id, bed_id):
        result = self.put(f'tenants/{tenant_id}/assign-bed/', json={'bed_id': bed_id})
        self.invalidate('beds')
        return result

    def vacate_tenant(self, tenant_id, leaving_date, reason=None):
        result = self.put(f'tenants/{tenant_id}/vacate/', json={'leaving_date': str(leaving_date),
                                                                'reason': reason})
        self.invalidate('beds')
        return result

    # --- Payments ---

    def list_payments(self, **params):
        return self.get('payments/', params)

    def get_payment(self, payment_id):
        return self.get(f'payments/{payment_id}/')

    def create_payment(self, **fields):
        return self.post('payments/', json=fields)

    def update_payment(self, payment_id, **fields):
        return self.put(f'payments/{payment_id}/', json=fields)

    def delete_payment(self, payment_id):
        return self.delete(f'payments/{payment_id}/')

    def mark_payment_paid(self, payment_id, **fields):
        return self.put(f'payments/{payment_id}/mark-paid/', json=fields)

    def generate_payments(self, property_id, due_date, payment_type='RENT', amount=None, tenant_ids=None,
                          description=None):
        body = {'property_id': property_id, 'due_date': str(due_date), 'payment_type': payment_type}
        if amount is not None:
            body['amount'] = str(amount)
        if tenant_ids is not None:
            body['tenant_ids'] = list(tenant_ids)
        if description:
            body['description'] = description
        return self.post('payments/bulk/', json=body)

    def payment_stats(self, year=None, property_id=None):
        return self.get('payments/stats/', {'year': year, 'property_id': property_id})

    # --- Dashboard ---

    def dashboard_stats(self, property_id=None):
        return self.get('dashboard/stats/', {'property_id': property_id})

    def dashboard_activities(self, limit=20, property_id=None):
        return self.get('dashboard/activities/', {'limit': limit, 'property_id': property_id})

    def occupancy_trends(self, months=6, property_id=None):
        return self.get('dashboard/occupancy-trends/', {'months': months, 'property_id': property_id})

    def revenue_trends(self, months=6, property_id=None):
        return self.get('dashboard/revenue-trends/', {'months': months, 'property_id': property_id})

    def dashboard_settings(self):
        return self.get('dashboard/user-settings/')

    def update_dashboard_settings(self, **fields):
        return self.put('dashboard/user-settings/', json=fields)

    # --- Settings ---

    def property_settings(self, property_id):
        return self.get(f'settings/property/{property_id}/')

    def update_property_settings(self, property_id, **fields):
        return self.put(f'settings/property/{property_id}/', json=fields)

    def property_rules(self, property_id):
        return self.get(f'settings/property/{property_id}/rules/')

    def update_property_rules(self, property_id, rules):
        return self.put(f'settings/property/{property_id}/rules/', json={'rules': rules})

    def user_settings(self):
        return self.get('settings/user/')

    def update_user_settings(self, **fields):
        return self.put('settings/user/', json=fields)

    def export_data(self):
        return self.request('GET', 'settings/export/')

    def reset_settings(self, settings_type='all'):
        return self.post('settings/reset/', json={'settings_type': settings_type})

    # --- Documents and notices ---

    def list_documents(self, property_id, **params):
        return self.get('documents/', {'property_id': property_id, **params})

    def upload_document(self, property_id, file_obj, filename, title, document_type='OTHER', **fields):
        data = {'property_id': property_id, 'title': title, 'document_type': document_type, **fields}
        return self.post('documents/', data=data, files={'file': (filename, file_obj)})

    def update_document(self, document_id, **fields):
        return self.put(f'documents/{document_id}/', json=fields)

    def delete_document(self, document_id):
        return self.delete(f'documents/{document_id}/')

    def download_document(self, document_id) -> bytes:
        return self.request('GET', f'documents/{document_id}/download/', raw=True)

    def list_notices(self, property_id, **params):
        return self.get('notices/', {'property_id': property_id, **params})

    def get_notice(self, notice_id):
        return self.get(f'notices/{notice_id}/')

    def create_notice(self, property_id, title, content, **fields):
        return self.post('notices/', json={'property_id': property_id, 'title': title, 'content': content,
                                           **fields})

    def update_notice(self, notice_id, **fields):
        return self.put(f'notices/{notice_id}/', json=fields)

    def delete_notice(self, notice_id):
        return self.delete(f'notices/{notice_id}/')

    def mark_notice_read(self, notice_id, tenant_id):
        return self.post(f'notices/{notice_id}/read/', json={'tenant_id': tenant_id})

    # --- Admin ---

    def admin_users(self, **params):
        return self.get('admin/users/', params)

    def admin_user_stats(self):
        return self.get('admin/users/stats/')

    def admin_pending_users(self):
        return self.get('admin/users/pending/')

    def admin_update_user_status(self, user_id, status, reason=None):
        return self.put('admin/users/status/', json={'user_id': user_id, 'status': status, 'reason': reason})

    def admin_update_user_role(self, user_id, role):
        return self.put('admin/users/role/', json={'user_id': user_id, 'role': role})

    def admin_delete_user(self, user_id, reason):
        return self.delete('admin/users/', json={'user_id': user_id, 'reason': reason})

    def admin_actions(self, **params):
        return self.get('admin/actions/', params)

    def audit_logs(self, **params):
        return self.get('audit-logs/', params)
