import pytest
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from notifications.dispatcher import get_dispatcher
from notifications.push import locmem
from notifications.registry import registry

from tests.factories import AdminUserFactory, UserFactory


class RecordingLiveSink:
    """Stands in for the channel layer: keeps (group, event, payload) tuples."""

    def __init__(self):
        self.sent = []

    def emit(self, group, event, payload):
        self.sent.append((group, event, payload))

    def events(self, group):
        return [event for g, event, _ in self.sent if g == group]

    def payloads(self, group):
        return [payload for g, _, payload in self.sent if g == group]


@pytest.fixture(autouse=True)
def live_events(monkeypatch):
    """Every dispatched live event, without going through the channel layer."""
    sink = RecordingLiveSink()
    monkeypatch.setattr(get_dispatcher(), "live", sink)
    return sink


@pytest.fixture(autouse=True)
def push_outbox():
    """Messages delivered by the locmem push backend."""
    locmem.reset()
    yield locmem.outbox
    locmem.reset()


@pytest.fixture(autouse=True)
def clean_registry():
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def api_client() -> APIClient:
    """Unauthenticated DRF APIClient."""
    return APIClient(enforce_csrf_checks=False)


@pytest.fixture
def user(db):
    """A persisted customer."""
    return UserFactory(username="testuser", email="test@example.com", first_name="Test", last_name="User")


@pytest.fixture
def admin_user(db):
    """Staff member running the order board."""
    return AdminUserFactory(username="counter", email="counter@example.com")


@pytest.fixture
def kitchen_user(db):
    """Non-staff user in the Kitchen role."""
    cook = UserFactory(username="cook", email="cook@example.com")
    cook.groups.add(Group.objects.get_or_create(name="Kitchen")[0])
    return cook


@pytest.fixture
def auth_api_client(api_client: APIClient, user):
    """APIClient authenticated as the customer via force_authenticate."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_api_client(admin_user):
    client = APIClient(enforce_csrf_checks=False)
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def tea_items():
    return [{"name": "Tea", "unit_price": "20", "quantity": 2}]
