import csv
import json
from datetime import datetime

from unifi_client_manager.export import export_csv, export_json, to_dict_list
from unifi_client_manager.models import MergedClient, UnifiClient


def merged():
    return [
        MergedClient(_id="1", mac="aa:00:00:00:00:01", hostname="laptop", ip="192.168.1.2",
                     last_seen=1700000000, tags=["kids", "tablet"], blocked=True,
                     last_blocked_at=datetime(2024, 5, 1, 12, 30)),
        MergedClient(_id="2", mac="aa:00:00:00:00:02", hostname="printer"),
    ]


def test_to_dict_list_accepts_models_and_dicts():
    result = to_dict_list([UnifiClient(_id="1", mac="aa:00:00:00:00:01"), {"mac": "raw"}])

    assert result[0]["mac"] == "aa:00:00:00:00:01"
    assert result[1] == {"mac": "raw"}


def test_export_csv(tmp_path):
    path = tmp_path / "clients.csv"

    export_csv(merged(), str(path))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2
    assert rows[0]["mac"] == "aa:00:00:00:00:01"
    assert rows[0]["tags"] == "kids, tablet"
    assert rows[0]["blocked"] == "True"
    assert rows[0]["lastBlockedAt"] == "2024-05-01T12:30:00"
    assert rows[1]["ip"] == ""


def test_export_csv_custom_fields(tmp_path):
    path = tmp_path / "clients.csv"

    export_csv(merged(), str(path), fields=["mac", "hostname"])

    with open(path, newline="", encoding="utf-8") as f:
        header = next(csv.reader(f))
    assert header == ["mac", "hostname"]


def test_export_json(tmp_path):
    path = tmp_path / "clients.json"

    export_json(merged(), str(path))

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert [c["mac"] for c in data] == ["aa:00:00:00:00:01", "aa:00:00:00:00:02"]
    assert data[0]["tags"] == ["kids", "tablet"]
    assert data[1]["lastBlockedAt"] is None
