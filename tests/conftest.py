import json
from unittest.mock import patch

import pytest
import requests

from unifi_client_manager.api_client import UnifiController
from unifi_client_manager.db import create_db_engine, create_session_factory
from unifi_client_manager.endpoints import VERIFY_PATH
from unifi_client_manager.exceptions import UnifiOperationError
from unifi_client_manager.service import ClientService
from unifi_client_manager.store import ClientStore

BASE_URL = "https://controller.local"

ALL_STA = "/proxy/network/api/s/default/stat/all_sta"
STA = "/proxy/network/api/s/default/stat/sta"
LIST_USER = "/proxy/network/api/s/default/list/user"
ALL_USER = "/proxy/network/api/s/default/stat/alluser"


def make_response(status_code=200, body=None, raw=None):
    """Build a real requests.Response carrying a JSON (or raw) body."""
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw.encode()
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    return response


class FakeTransport:
    """Answers session.request calls from a table keyed by (method, path).

    Unknown routes answer 404. A route may map to an exception instance,
    which is raised instead of answering.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, result):
        self.routes[(method, path)] = result

    def __call__(self, method, url, **kwargs):
        assert url.startswith(BASE_URL)
        path = url[len(BASE_URL):]
        self.calls.append((method, path, kwargs))
        result = self.routes.get((method, path))
        if result is None:
            return make_response(404, {"error": "not found"})
        if isinstance(result, Exception):
            raise result
        return result

    def paths(self, method=None):
        return [p for m, p, _ in self.calls if method is None or m == method]


class FakeController:
    """Stands in for UnifiController in service and route tests."""

    def __init__(self, clients=None, fail_macs=()):
        self.clients = list(clients or [])
        self.fail_macs = set(fail_macs)
        self.actions = []
        self.list_error = None

    def list_clients(self):
        if self.list_error is not None:
            raise self.list_error
        return list(self.clients)

    def block_client(self, mac):
        self._act(mac, "block")

    def unblock_client(self, mac):
        self._act(mac, "unblock")

    def _act(self, mac, action):
        self.actions.append((action, mac))
        if mac in self.fail_macs:
            raise UnifiOperationError(f"Failed to {action} client {mac}")


@pytest.fixture
def transport():
    fake = FakeTransport()
    fake.add("GET", VERIFY_PATH, make_response(200, {"data": [{"id": "default"}]}))
    return fake


@pytest.fixture
def controller(transport):
    client = UnifiController(BASE_URL, "test-api-key")
    with patch.object(client.session, "request", side_effect=transport):
        yield client


@pytest.fixture
def store():
    engine = create_db_engine("sqlite://")
    return ClientStore(create_session_factory(engine))


@pytest.fixture
def fake_controller():
    return FakeController()


@pytest.fixture
def service(fake_controller, store):
    return ClientService(fake_controller, store)
