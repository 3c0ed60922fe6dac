"""
Pytest configuration and fixtures
"""
import copy
import os
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from google.api_core.exceptions import NotFound

# Set test environment
os.environ['FLASK_ENV'] = 'testing'
os.environ.setdefault('GOOGLE_APPLICATION_CREDENTIALS', 'test-credentials.json')

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# ========================================
# In-memory Firestore
# ========================================

class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, store, path):
        self._store = store
        self.path = path
        self.id = path[-1]

    def get(self):
        return FakeSnapshot(self, self._store.get(self.path))

    def set(self, data, merge=False):
        if merge and self.path in self._store:
            self._store[self.path].update(copy.deepcopy(data))
        else:
            self._store[self.path] = copy.deepcopy(data)

    def update(self, data):
        if self.path not in self._store:
            raise NotFound(f"No document to update: {'/'.join(self.path)}")
        self._store[self.path].update(copy.deepcopy(data))

    def delete(self):
        self._store.pop(self.path, None)

    def collection(self, name):
        return FakeCollection(self._store, self.path + (name,))


class FakeQuery:
    def __init__(self, collection, filters=(), limit=None):
        self._collection = collection
        self._filters = tuple(filters)
        self._limit = limit

    def where(self, field, op, value):
        if op != '==':
            raise NotImplementedError(op)
        return FakeQuery(self._collection, self._filters + ((field, value),), self._limit)

    def limit(self, count):
        return FakeQuery(self._collection, self._filters, count)

    def stream(self):
        results = [
            doc for doc in self._collection._snapshots()
            if all(doc.to_dict().get(field) == value for field, value in self._filters)
        ]
        return iter(results[:self._limit] if self._limit is not None else results)


class FakeCollection(FakeQuery):
    def __init__(self, store, path):
        self._store = store
        self.path = path
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocument(self._store, self.path + (doc_id or uuid.uuid4().hex[:20],))

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return NOW, ref

    def _snapshots(self):
        depth = len(self.path) + 1
        return [
            FakeSnapshot(FakeDocument(self._store, path), data)
            for path, data in self._store.items()
            if len(path) == depth and path[:-1] == self.path
        ]


class FakeFirestore:
    """Just enough of google.cloud.firestore.Client for the routes and services."""

    def __init__(self):
        self.store = {}

    def collection(self, name):
        return FakeCollection(self.store, (name,))

    def seed(self, collection, doc_id, data):
        self.collection(collection).document(doc_id).set(data)

    def data(self, *path):
        return self.store.get(tuple(path))


@pytest.fixture
def fake_db():
    """Firestore fake installed as the app's client"""
    db = FakeFirestore()
    with patch('keyhub.extensions.db', db):
        yield db


# ========================================
# App and auth
# ========================================

@pytest.fixture
def app(fake_db):
    """Create Flask app for testing"""
    from keyhub import create_app
    return create_app(testing=True)


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def mock_firebase_user():
    """Decoded ID token of the signed-in test user"""
    return {
        'uid': 'test-user-id',
        'email': 'test@example.com',
        'name': 'Test User'
    }


@pytest.fixture
def auth_headers():
    return {'Authorization': 'Bearer test-token'}


@pytest.fixture
def login(fake_db, mock_firebase_user):
    """
    Sign in as the test user with the given role and status.

    Returns a function so each test picks its role:
        login('admin')
    """
    patcher = patch('keyhub.extensions.fb_auth.verify_id_token', return_value=mock_firebase_user)
    patcher.start()

    def _login(role, status='active'):
        fake_db.seed('users', mock_firebase_user['uid'], {
            'uid': mock_firebase_user['uid'],
            'email': mock_firebase_user['email'],
            'role': role,
            'status': status,
        })
        return mock_firebase_user

    yield _login
    patcher.stop()


# ========================================
# Sample entities
# ========================================

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_campaigns():
    return [
        {'id': 'c1', 'name': 'Spring Roofing', 'platform': 'google_ads', 'spend': 1200.0, 'leadsGenerated': 40,
         'startDate': NOW - timedelta(days=30), 'endDate': NOW + timedelta(days=30)},
        {'id': 'c2', 'name': 'Meta Siding', 'platform': 'meta', 'spend': 800.0, 'leadsGenerated': 10,
         'startDate': NOW - timedelta(days=60), 'endDate': NOW - timedelta(days=1)},
        {'id': 'c3', 'name': 'Home Show', 'platform': 'event', 'spend': 500.0, 'leadsGenerated': 0,
         'startDate': NOW + timedelta(days=5), 'endDate': None},
    ]


@pytest.fixture
def sample_leads():
    return [
        {'id': 'l1', 'source': 'google_ads', 'quality': 'hot', 'status': 'new', 'createdAt': NOW - timedelta(hours=2)},
        {'id': 'l2', 'source': 'google_ads', 'quality': 'warm', 'status': 'assigned', 'createdAt': NOW - timedelta(hours=30)},
        {'id': 'l3', 'source': 'meta', 'quality': 'cold', 'status': 'converted', 'createdAt': NOW - timedelta(days=3)},
        {'id': 'l4', 'source': 'billboard', 'quality': 'warm', 'status': 'contacted', 'createdAt': NOW - timedelta(hours=1)},
    ]


@pytest.fixture
def sample_subscriptions():
    return [
        {'id': 's1', 'tier': 'starter', 'status': 'active', 'monthlyFee': 399, 'leadCap': 15},
        {'id': 's2', 'tier': 'growth', 'status': 'active', 'monthlyFee': 899, 'leadCap': 25},
        {'id': 's3', 'tier': 'pro', 'status': 'paused', 'monthlyFee': 1499, 'leadCap': 0},
        {'id': 's4', 'tier': 'starter', 'status': 'cancelled', 'monthlyFee': 399, 'leadCap': 15},
    ]


@pytest.fixture
def sample_invoices():
    return [
        {'id': 'i1', 'invoiceNumber': 'INV-2025-0001', 'status': 'paid', 'total': 500.0,
         'dueDate': NOW - timedelta(days=10), 'from': {'entity': 'kd'}, 'to': {'entity': 'kr'}},
        {'id': 'i2', 'invoiceNumber': 'INV-2025-0002', 'status': 'sent', 'total': 1200.0,
         'dueDate': NOW - timedelta(days=2), 'from': {'entity': 'kts'}, 'to': {'entity': 'kr'}},
        {'id': 'i3', 'invoiceNumber': 'INV-2025-0003', 'status': 'sent', 'total': 300.0,
         'dueDate': NOW + timedelta(days=5), 'from': {'entity': 'kr'}, 'to': {'entity': 'customer', 'name': 'Jane Doe'}},
        {'id': 'i4', 'invoiceNumber': 'INV-2025-0004', 'status': 'draft', 'total': 75.5,
         'dueDate': None, 'from': {'entity': 'kd'}, 'to': {'entity': 'subscriber'}},
    ]
