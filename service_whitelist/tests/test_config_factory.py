"""
Unit tests for whitelist configuration, the factory and ambient helpers.
"""

import threading
import time

import pytest
from prometheus_client import CollectorRegistry
from pydantic import ValidationError as SettingsValidationError

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_whitelist.app.acl.codec import JsonFormat
from service_whitelist.app.acl.dual import LaunchPolicy
from service_whitelist.app.acl.factory import build_dual_acl
from service_whitelist.app.acl.stub import HostStub, NetStub
from shared.config import get_config
from shared.errors import AuthorizationError, ParseError, ValidationError
from shared.locks import ReadWriteLock
from shared.metrics import WhitelistMetrics


class TestConfig:
    """Test cases for WhitelistConfig."""

    def test_defaults(self, monkeypatch):
        for name in ("WHITELIST_JSON_FORMAT", "WHITELIST_LAUNCH_POLICY", "WHITELIST_STUBBED"):
            monkeypatch.delenv(name, raising=False)

        config = get_config()

        assert config.json_format == "compatibility"
        assert config.launch_policy == "sequenced"
        assert config.stubbed is False
        assert config.max_workers == 4

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("WHITELIST_JSON_FORMAT", "new")
        monkeypatch.setenv("WHITELIST_LAUNCH_POLICY", "concurrent")
        monkeypatch.setenv("WHITELIST_CLIENT_IP_HEADER", "X-Forwarded-For")

        config = get_config()

        assert config.json_format == "new"
        assert config.launch_policy == "concurrent"
        assert config.client_ip_header == "X-Forwarded-For"

    def test_rejects_unknown_policy(self):
        with pytest.raises(SettingsValidationError):
            get_config(launch_policy="eventually")

    def test_concurrent_policy_needs_two_workers(self):
        with pytest.raises(SettingsValidationError):
            get_config(launch_policy="concurrent", max_workers=1)

        assert get_config(max_workers=2).max_workers == 2


class TestFactory:
    """Test cases for build_dual_acl."""

    @pytest.fixture
    def metrics(self):
        return WhitelistMetrics(CollectorRegistry())

    def test_builds_basic_dual(self, metrics):
        config = get_config(json_format="new", launch_policy="concurrent", max_workers=2, stubbed=False)

        with build_dual_acl(config, metrics=metrics) as acl:
            assert acl.launch_policy == LaunchPolicy.CONCURRENT
            assert acl.addresses.json_format == JsonFormat.NEW
            assert acl.networks.json_format == JsonFormat.NEW
            assert acl.max_workers == 2
            assert acl.permitted("10.0.0.1") is False

    def test_builds_stub_dual(self, metrics):
        acl = build_dual_acl(get_config(stubbed=True), metrics=metrics)

        assert isinstance(acl.addresses, HostStub)
        assert isinstance(acl.networks, NetStub)
        assert acl.permitted("10.0.0.1") is True


class TestErrors:
    """Test cases for the error hierarchy."""

    def test_parse_error(self):
        error = ParseError("invalid IP network 10.0.0.0/99", token="10.0.0.0/99")

        assert isinstance(error, ValidationError)
        response = error.to_response()
        assert response.code == "PARSE_ERROR"
        assert response.details == {"token": "10.0.0.0/99"}
        assert response.trace_id is None

    def test_authorization_error(self):
        response = AuthorizationError("denied").to_response()
        assert response.code == "AUTHORIZATION_ERROR"
        assert response.message == "denied"


class TestReadWriteLock:
    """Test cases for ReadWriteLock."""

    def test_readers_share(self):
        lock = ReadWriteLock()
        entered = threading.Event()

        def reader():
            with lock.read_locked():
                entered.set()

        with lock.read_locked():
            thread = threading.Thread(target=reader)
            thread.start()
            assert entered.wait(timeout=2)
        thread.join()

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        written = threading.Event()

        def writer():
            with lock.write_locked():
                written.set()

        with lock.read_locked():
            thread = threading.Thread(target=writer)
            thread.start()
            time.sleep(0.05)
            assert not written.is_set()

        assert written.wait(timeout=2)
        thread.join()

    def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        order = []

        lock.acquire_read()

        def writer():
            with lock.write_locked():
                order.append("writer")

        def reader():
            with lock.read_locked():
                order.append("reader")

        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        time.sleep(0.05)
        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        time.sleep(0.05)
        assert order == []

        lock.release_read()
        writer_thread.join(timeout=2)
        reader_thread.join(timeout=2)
        assert order == ["writer", "reader"]
