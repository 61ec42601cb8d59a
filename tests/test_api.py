"""HTTP endpoint tests through the FastAPI TestClient."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from topology.config import DriverNameSet
from topology.errors import RequestDecodeError, ResponseEncodeError, VolumeDiscoveryError
from topology.service import create_app
from topology.services.codec import JsonCodec


class FailingEncodeCodec(JsonCodec):
    def encode(self, payload):
        raise ResponseEncodeError("marshalling response: boom")


class FailingBodyCodec(JsonCodec):
    def decode_body(self, body):
        raise RequestDecodeError("decoding body: boom")


class FailingTargetCodec(JsonCodec):
    def decode_target(self, target):
        raise RequestDecodeError("unmarshalling target: boom")


@pytest.fixture
def volume_finder(mixed_volumes) -> MagicMock:
    finder = MagicMock()
    finder.get_persistent_volumes.return_value = mixed_volumes
    finder.driver_names = DriverNameSet(["csi-vxflexos.dellemc.com", "csi-isilon.dellemc.com"])
    return finder


@pytest.fixture
def failing_finder() -> MagicMock:
    finder = MagicMock()
    finder.get_persistent_volumes.side_effect = VolumeDiscoveryError("listing persistent volumes failed")
    return finder


def _client(finder, **kwargs) -> TestClient:
    return TestClient(create_app(finder, **kwargs))


def _targets(*maps) -> dict:
    return {"targets": [{"target": json.dumps(m)} for m in maps]}


class TestRoot:
    @pytest.mark.parametrize("method", ["get", "post"])
    def test_root_ok_with_empty_body(self, volume_finder, method):
        response = getattr(_client(volume_finder), method)("/")
        assert response.status_code == 200
        assert response.content == b""
        volume_finder.get_persistent_volumes.assert_not_called()


class TestQuery:
    @pytest.mark.parametrize("path", ["/query", "/topology.json"])
    def test_no_body_returns_all_rows(self, volume_finder, path):
        response = _client(volume_finder).post(path)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        payload = response.json()
        assert len(payload) == 1
        table = payload[0]
        assert table["type"] == "table"
        assert len(table["columns"]) == 12
        assert all(column["type"] == "string" for column in table["columns"])
        assert [row[1] for row in table["rows"]] == ["pv-1", "pv-2", "pv-3"]

    def test_null_targets_returns_all_rows(self, volume_finder):
        response = _client(volume_finder).post("/query", json={"targets": None})

        assert response.status_code == 200
        assert [row[1] for row in response.json()[0]["rows"]] == ["pv-1", "pv-2", "pv-3"]

    def test_query_runs_in_span(self, volume_finder, recording_tracing, span_exporter):
        response = _client(volume_finder, tracing=recording_tracing).post("/query")

        assert response.status_code == 200
        assert [span.name for span in span_exporter.get_finished_spans()] == ["queryRequest"]

    def test_filters_by_target(self, volume_finder):
        response = _client(volume_finder).post("/query", json=_targets({"Namespace": "ns-1"}))

        assert response.status_code == 200
        rows = response.json()[0]["rows"]
        assert [row[0] for row in rows] == ["ns-1", "ns-1"]

    def test_targets_are_anded(self, volume_finder):
        body = _targets({"Storage Pool": "pool2"}, {"Protocol": "nfs"})
        response = _client(volume_finder).post("/query", json=body)

        assert response.status_code == 200
        assert response.json()[0]["rows"] == []
        assert len(response.json()[0]["columns"]) == 12

    def test_escaped_target(self, volume_finder):
        body = {"targets": [{"target": '{\\"CSI Driver\\":\\"isilon\\"}'}]}
        response = _client(volume_finder).post("/query", json=body)

        assert response.status_code == 200
        assert [row[1] for row in response.json()[0]["rows"]] == ["pv-3"]

    def test_discovery_error_is_bare_500(self, failing_finder):
        response = _client(failing_finder).post("/query", json=_targets({"Namespace": "ns-1"}))
        assert response.status_code == 500
        assert response.content == b""

    def test_malformed_body_is_500(self, volume_finder):
        response = _client(volume_finder).post(
            "/query", content=b'{"targets": [', headers={"content-type": "application/json"}
        )
        assert response.status_code == 500
        assert response.content == b""

    def test_target_missing_field_is_500(self, volume_finder):
        response = _client(volume_finder).post("/query", json={"targets": [{"refId": "A"}]})
        assert response.status_code == 500

    def test_malformed_target_is_500(self, volume_finder):
        response = _client(volume_finder).post("/query", json={"targets": [{"target": "{not json"}]})
        assert response.status_code == 500

    @pytest.mark.parametrize("codec", [FailingBodyCodec(), FailingTargetCodec(), FailingEncodeCodec()])
    def test_codec_faults_are_500(self, volume_finder, codec):
        client = _client(volume_finder, codec=codec)
        response = client.post("/query", json=_targets({"Namespace": "ns-1"}))
        assert response.status_code == 500
        assert response.content == b""


class TestSearch:
    def test_distinct_namespaces(self, volume_finder):
        response = _client(volume_finder).post("/search", json={"target": "Namespace"})

        assert response.status_code == 200
        assert sorted(response.json()) == ["ns-1", "ns-2"]

    def test_no_body_returns_empty_list(self, volume_finder):
        response = _client(volume_finder).post("/search")

        assert response.status_code == 200
        assert response.json() == []

    def test_unknown_field_returns_empty_list(self, volume_finder):
        response = _client(volume_finder).post("/search", json={"target": "Persistent Volume"})

        assert response.status_code == 200
        assert response.json() == []

    def test_malformed_body_is_500(self, volume_finder):
        response = _client(volume_finder).post(
            "/search", content=b"{target", headers={"content-type": "application/json"}
        )
        assert response.status_code == 500

    def test_discovery_error_is_bare_500(self, failing_finder):
        response = _client(failing_finder).post("/search", json={"target": "Namespace"})
        assert response.status_code == 500
        assert response.content == b""

    def test_encode_fault_is_500(self, volume_finder):
        response = _client(volume_finder, codec=FailingEncodeCodec()).post("/search", json={"target": "Namespace"})
        assert response.status_code == 500


class TestDebugVars:
    def test_not_mounted_by_default(self, volume_finder):
        assert _client(volume_finder).get("/debug/vars").status_code == 404

    def test_counters_and_driver_names(self, volume_finder):
        client = _client(volume_finder, enable_debug=True)
        client.post("/query")
        client.post("/query", json={"targets": [{"target": "{bad"}]})

        payload = client.get("/debug/vars").json()

        assert payload["driver_names"] == ["csi-vxflexos.dellemc.com", "csi-isilon.dellemc.com"]
        assert payload["counters"]["requests"] == 2
        assert payload["counters"]["request_errors"] == 1
        assert payload["counters"]["discovery_errors"] == 0
        assert payload["timestamp"].endswith("+00:00")


class TestLifespan:
    def test_config_watcher_started_and_stopped(self, volume_finder):
        watcher = MagicMock()
        with TestClient(create_app(volume_finder, config_watcher=watcher)) as client:
            watcher.start.assert_called_once_with()
            assert client.get("/").status_code == 200
        watcher.stop.assert_called_once_with()

    def test_tracing_shut_down_with_app(self, volume_finder):
        tracing = MagicMock()
        with TestClient(create_app(volume_finder, tracing=tracing)):
            tracing.shutdown.assert_not_called()
        tracing.shutdown.assert_called_once_with()
