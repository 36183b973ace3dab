import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from notification_relay.context import RelayContext
from notification_relay.main import create_app
from notification_relay.notifications.schemas import TokenRecord

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryTokenStore:
    def __init__(self, tokens=None):
        self.tokens = {user_id: TokenRecord(fcmToken=token) for user_id, token in (tokens or {}).items()}
        self.calls = []
        self.fail_get = None
        self.fail_delete = None

    def get(self, user_id):
        self.calls.append(('get', user_id))
        if self.fail_get:
            raise self.fail_get
        return self.tokens.get(user_id)

    def delete(self, user_id):
        self.calls.append(('delete', user_id))
        if self.fail_delete:
            raise self.fail_delete
        self.tokens.pop(user_id, None)


class InMemoryHistoryStore:
    def __init__(self):
        self.records = []
        self.calls = []
        self.fail_append = None
        self.fail_list = None

    def append(self, record):
        self.calls.append(('append', record.receiverId))
        if self.fail_append:
            raise self.fail_append
        stored = record.model_copy(update={
            'id': f"notif-{len(self.records) + 1}",
            'timestamp': BASE_TIME + timedelta(seconds=len(self.records)),
        })
        self.records.append(stored)
        return stored.id

    def list_for_receiver(self, user_id, limit):
        self.calls.append(('list', user_id, limit))
        if self.fail_list:
            raise self.fail_list
        matching = [r for r in self.records if r.receiverId == user_id]
        matching.sort(key=lambda r: r.timestamp, reverse=True)
        return matching[:limit]


class FakeMessenger:
    def __init__(self):
        self.sent = []
        self.error = None

    def send(self, payload):
        self.sent.append(payload)
        if self.error:
            raise self.error
        return f"projects/test-project/messages/{len(self.sent)}"


@pytest.fixture
def token_store():
    return InMemoryTokenStore({'u1': 'tok_abc'})


@pytest.fixture
def history_store():
    return InMemoryHistoryStore()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def context(token_store, history_store, messenger):
    return RelayContext(
        token_store=token_store,
        history_store=history_store,
        messenger=messenger,
        firebase_initialized=True,
    )


@pytest.fixture
def app(context):
    return create_app(context)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return TestClient(app)


@pytest.fixture
def chat_request():
    return {
        "receiverId": "u1",
        "senderId": "u2",
        "senderName": "Bob",
        "message": "hi",
        "conversationId": "c1",
    }
