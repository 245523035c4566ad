# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for registry snapshots: level-one copies restored between test cases."""

import pytest

from testbed.container import Container, ServerContainer
from testbed.container.types import service_key
from testbed.platform.ports import TimeZoneProvider, UrlGenerator
from testbed.testing.snapshot import DEFAULT_EXCLUDED, RegistrySnapshotStore


class Service:
    pass


@pytest.fixture
def store():
    return RegistrySnapshotStore()


@pytest.fixture
def container():
    container = Container(name="server")
    container.register_service("service", Service)
    container.register_service("counter", object, shared=False)
    container.bind("alias", "service")
    return container


class TestSnapshot:
    def test_captures_slots(self, store, container):
        snapshot = store.snapshot(container)
        assert snapshot.registry == "server"
        assert set(snapshot.slots) == set(Container.SLOT_NAMES)
        assert snapshot.keys() == ["service", "counter", "alias"]

    def test_slots_are_read_only(self, store, container):
        snapshot = store.snapshot(container)
        with pytest.raises(TypeError):
            snapshot.slots["factories"] = {}  # type: ignore[index]

    def test_later_registrations_do_not_leak_into_snapshot(self, store, container):
        snapshot = store.snapshot(container)
        container.register_service("late", object)
        assert "late" not in snapshot.slots["factories"]

    def test_instances_are_shared_not_copied(self, store, container):
        instance = container.get("service")
        snapshot = store.snapshot(container)
        assert snapshot.slots["instances"]["service"] is instance


class TestRestore:
    def test_restores_factory_map(self, store, container):
        snapshot = store.snapshot(container)
        container.register_service("service", lambda: "override", shared=False)
        container.register_service("extra", object)

        store.restore(container, snapshot)

        assert container.raw("service") is snapshot.slots["factories"]["service"]
        assert not container.has("extra")
        assert isinstance(container.get("service"), Service)

    def test_restores_transient_set(self, store, container):
        snapshot = store.snapshot(container)
        container.register_service("service", object, shared=False)
        store.restore(container, snapshot)
        assert container.get("service") is container.get("service")
        assert container.get("counter") is not container.get("counter")

    def test_restored_instances_are_the_same_objects(self, store, container):
        instance = container.get("service")
        snapshot = store.snapshot(container)
        container.register_service("service", object)
        store.restore(container, snapshot)
        assert container.get("service") is instance

    def test_snapshot_is_reusable(self, store, container):
        snapshot = store.snapshot(container)
        for _ in range(3):
            store.restore(container, snapshot)
            container.register_service("scratch", object)
            assert container.has("scratch")
        store.restore(container, snapshot)
        assert not container.has("scratch")
        assert "scratch" not in snapshot.slots["factories"]

    def test_restored_slots_are_copies(self, store, container):
        snapshot = store.snapshot(container)
        store.restore(container, snapshot)
        assert container.export_slots()["factories"] is not snapshot.slots["factories"]
        assert container.export_slots()["transient"] is not snapshot.slots["transient"]


class TestExclusions:
    def test_default_exclusions(self):
        assert DEFAULT_EXCLUDED == (TimeZoneProvider, UrlGenerator)
        assert RegistrySnapshotStore().excluded == (service_key(TimeZoneProvider), service_key(UrlGenerator))

    def test_cached_excluded_instances_are_dropped(self, store):
        server = ServerContainer()
        server.register_service(TimeZoneProvider, object)
        first = server.get(TimeZoneProvider)

        snapshot = store.snapshot(server)
        assert service_key(TimeZoneProvider) not in snapshot.slots["instances"]
        assert service_key(TimeZoneProvider) in snapshot.slots["factories"]

        store.restore(server, snapshot)
        assert server.get(TimeZoneProvider) is not first

    def test_exclusion_does_not_touch_live_registry(self, store):
        server = ServerContainer()
        server.register_service(UrlGenerator, object)
        generator = server.get(UrlGenerator)
        store.snapshot(server)
        assert server.get(UrlGenerator) is generator

    def test_custom_exclusions(self):
        store = RegistrySnapshotStore(excluded=["clock"])
        container = Container()
        container.register_service("clock", object)
        container.get("clock")
        assert "clock" not in store.snapshot(container).slots["instances"]
