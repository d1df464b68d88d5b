from datetime import datetime, timedelta

import pytest

from footprint import create_app, db
from footprint.models.emission import Emission

# A Wednesday; the current calendar week started on Sunday 2024-06-09
NOW = datetime(2024, 6, 12, 12, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_record():
    """Build unsaved Emission rows for the pure analytics functions."""
    def _make(value, category='Transport', activity='car', days_ago=0, hours_ago=0, timestamp=None):
        if timestamp is None:
            timestamp = NOW - timedelta(days=days_ago, hours=hours_ago)
        return Emission(
            user_id=1,
            user_name='Test User',
            category=category,
            activity=activity,
            value=float(value),
            timestamp=timestamp
        )
    return _make


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register_user(client, email='alex@example.com', name='Alex', surname='Green'):
    response = client.post('/api/auth/register', json={
        'name': name,
        'surname': surname,
        'email': email,
        'password': 'secret123'
    })
    assert response.status_code == 201
    body = response.get_json()
    return body['user'], {'Authorization': f"Bearer {body['access_token']}"}


@pytest.fixture
def user(client):
    return register_user(client)


@pytest.fixture
def other_user(client):
    return register_user(client, email='sam@example.com', name='Sam', surname='Blue')


@pytest.fixture
def log_emission(client):
    """POST an emission a few hours in the past for the given auth headers."""
    def _log(headers, value=10.0, category='Transport', activity='car', hours_ago=1, **extra):
        payload = {
            'category': category,
            'activity': activity,
            'value': value,
            'timestamp': (datetime.utcnow() - timedelta(hours=hours_ago)).isoformat(),
            **extra
        }
        if value is None:
            payload.pop('value')
        return client.post('/api/emissions/', json=payload, headers=headers)
    return _log
