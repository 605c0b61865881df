import time

import pytest

from unifi_client_manager.exceptions import (
    UnifiConfigurationError,
    UnifiOperationError,
    UnifiValidationError,
)
from unifi_client_manager.models import ClientMetadata, MergedClient, UnifiClient
from unifi_client_manager.service import (
    ClientService,
    filter_clients,
    merge_clients,
    tag_counts,
)

DAY = 24 * 60 * 60


def make_client(mac, blocked=False, last_seen=None, **kwargs):
    if last_seen is None:
        last_seen = int(time.time()) - 60
    return UnifiClient(_id=mac, mac=mac, blocked=blocked, last_seen=last_seen, **kwargs)


class TestMerge:
    @pytest.mark.parametrize("controller_blocked", [False, True])
    @pytest.mark.parametrize("local_blocked", [False, True])
    def test_blocked_is_logical_or(self, controller_blocked, local_blocked):
        client = make_client("aa:00:00:00:00:01", blocked=controller_blocked)
        metadata = {"aa:00:00:00:00:01": ClientMetadata(
            mac="aa:00:00:00:00:01", blocked=local_blocked)}

        merged, = merge_clients([client], metadata)

        assert merged.blocked is (controller_blocked or local_blocked)

    def test_without_metadata_tags_and_hidden_are_defined(self):
        client = make_client("aa:00:00:00:00:01", tags=["from-controller"])

        merged, = merge_clients([client], {})

        assert merged.tags == []
        assert merged.hidden is False
        assert merged.last_blocked_at is None

    def test_metadata_is_matched_by_normalized_mac(self):
        client = make_client("AA:00:00:00:00:01", hostname="tv")
        metadata = {"aa:00:00:00:00:01": ClientMetadata(
            mac="aa:00:00:00:00:01", tags=["media"], hidden=True, name="Living room TV")}

        merged, = merge_clients([client], metadata)

        assert merged.tags == ["media"]
        assert merged.hidden is True
        assert merged.name == "Living room TV"
        assert merged.hostname == "tv"

    def test_previous_snapshot_keeps_block(self):
        client = make_client("aa:00:00:00:00:01")
        previous = [MergedClient(_id="x", mac="aa:00:00:00:00:01", blocked=True)]

        merged, = merge_clients([client], {}, previous=previous)

        assert merged.blocked is True

    def test_to_dict_uses_wire_names(self):
        merged, = merge_clients([make_client("aa:00:00:00:00:01")], {})

        data = merged.to_dict()

        assert data["lastBlockedAt"] is None
        assert "last_blocked_at" not in data
        assert data["tags"] == []
        assert data["hidden"] is False


class TestFilter:
    @pytest.fixture
    def clients(self):
        now = int(time.time())
        return [
            MergedClient(_id="1", mac="aa:00:00:00:00:01", hostname="laptop",
                         ip="192.168.1.2", last_seen=now, tags=["work"]),
            MergedClient(_id="2", mac="aa:00:00:00:00:02", hostname="old-phone",
                         last_seen=now - 40 * DAY),
            MergedClient(_id="3", mac="aa:00:00:00:00:03", hostname="console",
                         last_seen=now - 40 * DAY, blocked=True, tags=["kids"]),
            MergedClient(_id="4", mac="aa:00:00:00:00:04", hostname="camera",
                         last_seen=now, hidden=True, tags=["kids", "iot"]),
        ]

    @staticmethod
    def macs(clients):
        return [c.mac[-2:] for c in clients]

    def test_default_view(self, clients):
        assert self.macs(filter_clients(clients)) == ["01", "03"]

    def test_blocked_and_hidden_views(self, clients):
        assert self.macs(filter_clients(clients, view="blocked")) == ["03"]
        assert self.macs(filter_clients(clients, view="hidden")) == ["04"]

    def test_tag_view_includes_hidden_clients(self, clients):
        assert self.macs(filter_clients(clients, tag="kids")) == ["03", "04"]

    def test_search_matches_hostname_ip_and_mac(self, clients):
        assert self.macs(filter_clients(clients, query="LAPTOP")) == ["01"]
        assert self.macs(filter_clients(clients, query="192.168.1.2")) == ["01"]
        assert self.macs(filter_clients(clients, view="hidden", query="00:04")) == ["04"]

    def test_invalid_view(self, clients):
        with pytest.raises(UnifiValidationError):
            filter_clients(clients, view="everything")

    def test_tag_counts(self, clients):
        assert tag_counts(clients) == {"work": 1, "kids": 2, "iot": 1}


class TestClientService:
    def test_set_blocked_updates_controller_and_store(self, service, fake_controller, store):
        saved = service.set_blocked("aa:00:00:00:00:01", True)

        assert fake_controller.actions == [("block", "aa:00:00:00:00:01")]
        assert saved.blocked is True
        assert saved.last_blocked_at is not None
        assert store.get("aa:00:00:00:00:01").blocked is True

    def test_failed_block_is_not_recorded(self, service, fake_controller, store):
        fake_controller.fail_macs.add("aa:00:00:00:00:01")

        with pytest.raises(UnifiOperationError):
            service.set_blocked("aa:00:00:00:00:01", True)

        assert store.get("aa:00:00:00:00:01") is None

    def test_apply_action_validates(self, service):
        with pytest.raises(UnifiValidationError):
            service.apply_action("aa:00:00:00:00:01", "reboot")
        with pytest.raises(UnifiValidationError):
            service.apply_action("", "block")

    def test_unconfigured_controller(self, store):
        service = ClientService(None, store)

        with pytest.raises(UnifiConfigurationError):
            service.list_controller_clients()
        with pytest.raises(UnifiConfigurationError):
            service.apply_action("aa:00:00:00:00:01", "block")

    def test_tags_are_added_and_removed(self, service):
        service.add_tag("aa:00:00:00:00:01", "kids")
        service.add_tag("aa:00:00:00:00:01", " tablet ")
        service.add_tag("aa:00:00:00:00:01", "kids")

        assert service.store.get("aa:00:00:00:00:01").tags == ["kids", "tablet"]

        saved = service.remove_tag("aa:00:00:00:00:01", "kids")
        assert saved.tags == ["tablet"]

    def test_empty_tag_is_rejected(self, service):
        with pytest.raises(UnifiValidationError):
            service.add_tag("aa:00:00:00:00:01", "  ")

    def test_hide(self, service):
        assert service.set_hidden("aa:00:00:00:00:01", True).hidden is True

    def test_merged_clients_accepts_previous_snapshot(self, service, fake_controller):
        fake_controller.clients = [make_client("aa:00:00:00:00:01")]
        previous = [MergedClient(_id="1", mac="AA:00:00:00:00:01", blocked=True)]

        assert service.merged_clients()[0].blocked is False
        assert service.merged_clients(previous=previous)[0].blocked is True

    def test_block_by_tag_stops_at_first_failure(self, service, fake_controller, store):
        fake_controller.clients = [
            make_client(f"aa:00:00:00:00:{suffix}") for suffix in ("01", "02", "03", "04")]
        for suffix in ("01", "02", "03"):
            store.upsert(f"aa:00:00:00:00:{suffix}", {"tags": ["kids"]})
        store.upsert("aa:00:00:00:00:04", {"tags": ["work"]})
        fake_controller.fail_macs.add("aa:00:00:00:00:02")

        with pytest.raises(UnifiOperationError):
            service.set_blocked_by_tag("kids", True)

        assert fake_controller.actions == [
            ("block", "aa:00:00:00:00:01"),
            ("block", "aa:00:00:00:00:02"),
        ]
        assert store.load_blocked_states() == {
            "aa:00:00:00:00:01": True,
            "aa:00:00:00:00:02": False,
            "aa:00:00:00:00:03": False,
            "aa:00:00:00:00:04": False,
        }

    def test_block_by_tag_follows_controller_order(self, service, fake_controller, store):
        fake_controller.clients = [
            make_client("AA:00:00:00:00:02"), make_client("aa:00:00:00:00:01")]
        store.upsert("aa:00:00:00:00:01", {"tags": ["kids"]})
        store.upsert("aa:00:00:00:00:02", {"tags": ["kids"]})

        changed = service.set_blocked_by_tag("kids", True)

        assert changed == ["aa:00:00:00:00:02", "aa:00:00:00:00:01"]

    def test_block_by_tag_skips_clients_gone_from_controller(self, service, fake_controller, store):
        fake_controller.clients = [make_client("aa:00:00:00:00:01")]
        store.upsert("aa:00:00:00:00:01", {"tags": ["kids"]})
        store.upsert("aa:00:00:00:00:09", {"tags": ["kids"]})

        changed = service.set_blocked_by_tag("kids", True)

        assert changed == ["aa:00:00:00:00:01"]
        assert fake_controller.actions == [("block", "aa:00:00:00:00:01")]
        assert store.get("aa:00:00:00:00:09").blocked is False

    def test_unblock_by_tag(self, service, fake_controller, store):
        fake_controller.clients = [
            make_client("aa:00:00:00:00:01"), make_client("aa:00:00:00:00:02")]
        store.upsert("aa:00:00:00:00:01", {"tags": ["kids"], "blocked": True})
        store.upsert("aa:00:00:00:00:02", {"tags": ["kids"], "blocked": True})

        changed = service.set_blocked_by_tag("kids", False)

        assert changed == ["aa:00:00:00:00:01", "aa:00:00:00:00:02"]
        assert [a for a, _ in fake_controller.actions] == ["unblock", "unblock"]
        assert not any(store.load_blocked_states().values())

    def test_block_by_tag_unconfigured(self, store):
        with pytest.raises(UnifiConfigurationError):
            ClientService(None, store).set_blocked_by_tag("kids", True)

    def test_dashboard_payload(self, service, fake_controller, store):
        fake_controller.clients = [
            make_client("aa:00:00:00:00:01", blocked=True),
            make_client("aa:00:00:00:00:02"),
            make_client("aa:00:00:00:00:03"),
        ]
        store.upsert("aa:00:00:00:00:02", {"tags": ["kids"], "blocked": True})
        store.upsert("aa:00:00:00:00:03", {"hidden": True})

        payload = service.dashboard(view="blocked")

        assert [c["mac"] for c in payload["clients"]] == [
            "aa:00:00:00:00:01", "aa:00:00:00:00:02"]
        assert payload["tags"] == {"kids": 1}
        assert payload["counts"] == {"all": 2, "hidden": 1, "blocked": 2}
