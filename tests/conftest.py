import copy
import os
import warnings

import pytest

# Settings are read at import time, so defaults go in before any app module is imported
os.environ.setdefault('KV_BACKEND', 'db')
os.environ.setdefault('DATABASE_URL', 'sqlite://:memory:')
os.environ.setdefault('SUPABASE_URL', 'https://project.example.co')
os.environ.setdefault('SUPABASE_ANON_KEY', 'anon-key')
os.environ.setdefault('SUPABASE_SERVICE_ROLE_KEY', 'service-key')

from fastapi.testclient import TestClient  # noqa: E402

# Suppress specific third-party deprecation warnings that surface during test collection
warnings.filterwarnings("ignore", category=DeprecationWarning, module=r"tortoise\..*")

AUTH_URL = 'https://project.example.co'
TEST_EMAIL = 'tester@example.com'
TEST_PASSWORD = 'secret-password'
TEST_TOKEN = 'good-token'


class InMemoryKVStore:
    """KVStoreInterface double; records write count so tests can assert "no write"."""

    def __init__(self):
        self.data = {}
        self.writes = 0

    async def get(self, key):
        value = self.data.get(key)
        return copy.deepcopy(value)

    async def set(self, key, value):
        self.writes += 1
        self.data[key] = copy.deepcopy(value)

    async def delete(self, key):
        self.writes += 1
        self.data.pop(key, None)

    async def get_by_prefix(self, prefix):
        # reverse insertion order: callers must not rely on store ordering
        return [copy.deepcopy(v) for k, v in reversed(list(self.data.items())) if k.startswith(prefix)]


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = '' if payload is None else str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError('no body')
        return self._payload


class DummyAuthClient:
    """Stands in for httpx.AsyncClient against the identity provider's auth API."""
    users = {}
    tokens = {}
    refresh_tokens = {}
    calls = []

    def __init__(self, *args, **kwargs):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    @classmethod
    def reset(cls):
        cls.users = {}
        cls.tokens = {}
        cls.refresh_tokens = {}
        cls.calls = []

    @classmethod
    def add_user(cls, email, password, name='', token=None):
        user = {'id': f'user-{len(cls.users) + 1}', 'email': email, 'user_metadata': {'name': name}}
        cls.users[email] = {'password': password, 'user': user}
        if token:
            cls.tokens[token] = user
        return user

    @classmethod
    def _issue(cls, user):
        n = len(cls.tokens) + 1
        access, refresh = f'access-{n}', f'refresh-{n}'
        cls.tokens[access] = user
        cls.refresh_tokens[refresh] = user
        return {'access_token': access, 'refresh_token': refresh, 'user': user}

    async def request(self, method, url, headers=None, json=None, params=None):
        headers = headers or {}
        path = url.split('/auth/v1', 1)[1]
        DummyAuthClient.calls.append((method, path, headers, json, params))
        token = headers.get('Authorization', '').split(' ', 1)[-1]

        if method == 'POST' and path == '/admin/users':
            if json['email'] in DummyAuthClient.users:
                return DummyResponse(422, {'msg': 'A user with this email address has already been registered'})
            user = DummyAuthClient.add_user(json['email'], json['password'], json['user_metadata']['name'])
            return DummyResponse(200, user)

        if method == 'POST' and path == '/token':
            if params['grant_type'] == 'password':
                account = DummyAuthClient.users.get(json['email'])
                if not account or account['password'] != json['password']:
                    return DummyResponse(400, {'error_description': 'Invalid login credentials'})
                return DummyResponse(200, DummyAuthClient._issue(account['user']))
            user = DummyAuthClient.refresh_tokens.pop(json['refresh_token'], None)
            if not user:
                return DummyResponse(400, {'error_description': 'Invalid Refresh Token'})
            return DummyResponse(200, DummyAuthClient._issue(user))

        if method == 'GET' and path == '/user':
            user = DummyAuthClient.tokens.get(token)
            if not user:
                return DummyResponse(401, {'msg': 'invalid JWT'})
            return DummyResponse(200, user)

        if method == 'POST' and path == '/logout':
            DummyAuthClient.tokens.pop(token, None)
            return DummyResponse(204)

        return DummyResponse(404, {'msg': 'not found'})


@pytest.fixture
def store():
    return InMemoryKVStore()


@pytest.fixture
def auth_provider(monkeypatch):
    DummyAuthClient.reset()
    DummyAuthClient.add_user(TEST_EMAIL, TEST_PASSWORD, token=TEST_TOKEN)
    monkeypatch.setattr('apps.user.services.httpx.AsyncClient', DummyAuthClient)
    monkeypatch.setattr('apps.user.services.SUPABASE_URL', AUTH_URL)
    return DummyAuthClient


@pytest.fixture
def client(store, auth_provider, monkeypatch):
    monkeypatch.setattr('apps.resources.services.pick_store', lambda: store)
    from main import app
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {'Authorization': f'Bearer {TEST_TOKEN}'}
