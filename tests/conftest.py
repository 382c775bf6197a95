"""Shared fixtures: an in-memory stand-in for the OVHcloud API."""

import threading

import pytest

from pool_providers.config import ProviderConfig
from pool_providers.providers.ovhcloud import OVHCloudProvider

SERVICE_ID = "project-123"
INSTANCE_PORT = 3128

POOL_CONFIG = {
    "endpoint": "ovh-eu",
    "appKey": "app-key",
    "appSecret": "app-secret",
    "consumerKey": "consumer-key",
    "serviceId": SERVICE_ID,
    "region": "GRA7",
    "name": "pool-a",
    "flavorName": "d2-2",
    "snapshotName": "proxy-image",
    "sshKeyName": "fleet-key",
}


def make_instance(instance_id, status="ACTIVE", name="pool-a", ips=("10.0.0.1",)):
    return {
        "id": instance_id,
        "status": status,
        "name": name,
        "ipAddresses": [{"ip": ip, "type": "public", "version": 4} for ip in ips],
    }


class FakeOVHClient:
    """Answers the project endpoints the provider uses and records every call."""

    def __init__(self, instances=None):
        self.instances = list(instances or [])
        self.listings = {
            "flavor": [
                {"id": "flavor-small", "name": "s1-2"},
                {"id": "flavor-d2", "name": "d2-2"},
            ],
            "snapshot": [{"id": "snap-1", "name": "proxy-image"}],
            "sshkey": [
                {"id": "key-other", "name": "other-key"},
                {"id": "key-1", "name": "fleet-key"},
            ],
        }
        self.calls = []
        self.errors = {}
        self.create_failures = 0
        self._created = 0
        self._lock = threading.Lock()

    def _endpoint(self, path):
        return path.split(f"/cloud/project/{SERVICE_ID}/", 1)[1]

    def _record(self, method, path, params):
        endpoint = self._endpoint(path)
        with self._lock:
            self.calls.append((method, endpoint, params))
        error = self.errors.get((method, endpoint))
        if error is not None:
            raise error
        return endpoint

    def get(self, path, **params):
        endpoint = self._record("GET", path, params)
        if endpoint == "instance":
            return list(self.instances)
        return list(self.listings[endpoint])

    def post(self, path, **params):
        self._record("POST", path, params)
        with self._lock:
            if self.create_failures:
                self.create_failures -= 1
                raise self.errors.get("create", RuntimeError("create failed"))
            self._created += 1
            instance_id = f"new-{self._created}"
        return {"id": instance_id, "name": params["name"], "status": "BUILD"}

    def delete(self, path, **params):
        self._record("DELETE", path, params)
        return None

    def count(self, method, endpoint):
        return sum(1 for m, e, _ in self.calls if m == method and e == endpoint)


@pytest.fixture
def config():
    return ProviderConfig.from_dict(POOL_CONFIG)


@pytest.fixture
def client():
    return FakeOVHClient()


@pytest.fixture
def provider(config, client):
    return OVHCloudProvider(config, INSTANCE_PORT, client=client)
