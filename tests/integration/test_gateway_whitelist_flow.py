"""
Integration tests for a gateway guarded by a persisted dual whitelist.
"""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_whitelist.app.acl import BasicNet, JsonFormat, build_dual_acl
from service_whitelist.app.domain import WhitelistMiddleware
from shared.config import get_config
from shared.errors import ParseError
from shared.metrics import WhitelistMetrics


class TestGatewayWhitelistFlow:
    """End-to-end flow: configure, persist, restore and enforce a whitelist."""

    @pytest.fixture
    def registry(self):
        return CollectorRegistry()

    @pytest.fixture
    def config(self):
        return get_config(
            json_format="compatibility",
            launch_policy="concurrent",
            client_ip_header="X-Forwarded-For",
            allow_paths=["/healthz"],
            stubbed=False,
        )

    def _gateway(self, acl, config):
        app = FastAPI()
        app.add_middleware(
            WhitelistMiddleware,
            acl=acl,
            allow_paths=config.allow_paths,
            ip_header=config.client_ip_header,
        )

        @app.get("/api/v1/instruments")
        def instruments():
            return {"instruments": []}

        @app.get("/healthz")
        def healthz():
            return {"status": "ok"}

        return TestClient(app)

    def test_persisted_whitelist_is_enforced(self, config, registry):
        metrics = WhitelistMetrics(registry)

        with build_dual_acl(config, metrics=metrics) as source:
            source.add_address("203.0.113.7")
            source.add_network("198.51.100.0/24")
            source.add_network("198.51.100.0/24")
            stored = json.dumps({"gateway": {"whitelist": json.loads(source.serialize())}})

        with build_dual_acl(config, metrics=metrics) as restored:
            restored.deserialize(json.dumps(json.loads(stored)["gateway"]["whitelist"]))
            assert len(restored.networks) == 2

            client = self._gateway(restored, config)
            headers = lambda ip: {"X-Forwarded-For": ip}

            assert client.get("/api/v1/instruments", headers=headers("203.0.113.7")).status_code == 200
            assert client.get("/api/v1/instruments", headers=headers("198.51.100.200")).status_code == 200
            assert client.get("/api/v1/instruments", headers=headers("192.0.2.1")).status_code == 403
            assert client.get("/healthz").status_code == 200

            # Revoking one of the duplicate networks keeps the other in force
            restored.remove_network("198.51.100.0/24")
            assert client.get("/api/v1/instruments", headers=headers("198.51.100.200")).status_code == 200
            restored.remove_network("198.51.100.0/24")
            assert client.get("/api/v1/instruments", headers=headers("198.51.100.200")).status_code == 403

        assert registry.get_sample_value("whitelist_checks_total", {"acl": "dual", "result": "denied"}) == 2

    def test_legacy_document_upgrades_to_new_format(self, registry):
        metrics = WhitelistMetrics(registry)
        legacy = b'"192.168.3.0/24, 192.168.7.0/24"'

        acl = BasicNet(JsonFormat.NEW, metrics=metrics)
        acl.deserialize(legacy)

        assert acl.serialize() == b'["192.168.3.0/24","192.168.7.0/24"]'

    def test_corrupt_document_fails_closed(self, config, registry):
        with build_dual_acl(config, metrics=WhitelistMetrics(registry)) as acl:
            acl.add_network("0.0.0.0/0")

            with pytest.raises(ParseError):
                acl.deserialize('{"addresses": "", "networks": "192.168.3.1/24,127.0.0.1/32,bogus"}')

            client = self._gateway(acl, config)
            response = client.get("/api/v1/instruments", headers={"X-Forwarded-For": "192.168.3.5"})
            assert response.status_code == 403
