"""
Stubbed whitelists.

These let whitelisting be wired into a service's flow before any policy
exists. Every check is permitted and every operation emits an audit warning,
so a stub left in production shows up in the logs and in
``whitelist_bypass_total``.
"""

from typing import Optional

from shared.logging import get_logger
from shared.metrics import WhitelistMetrics, get_metrics

from .base import HostACL, NetACL


class _Stub:
    kind = "whitelist"

    def __init__(self, metrics: Optional[WhitelistMetrics] = None):
        self.logger = get_logger(f"whitelist.stub.{self.kind}")
        self.metrics = metrics or get_metrics()
        self.logger.warning("Whitelisting is being stubbed", audit=True, acl=self.kind)

    def _bypass(self, message: str, operation: str, **context) -> None:
        self.metrics.record_bypass(operation)
        self.logger.warning(message, audit=True, acl=self.kind, operation=operation, **context)

    def permitted(self, ip) -> bool:
        """Always True; logs that the check was bypassed."""
        self._bypass("Whitelist check bypassed, whitelisting is stubbed", "permitted", ip=str(ip))
        return True

    def dump(self) -> str:
        self._bypass("Stubbed whitelist serialized as empty", "dump")
        return ""

    def load(self, value) -> None:
        self._bypass("Serialized whitelist ignored, whitelisting is stubbed", "load")


class HostStub(_Stub, HostACL):
    """Address whitelist that permits everything."""

    kind = "host"

    def add(self, ip) -> None:
        self._bypass("IP address added to whitelist but whitelisting is stubbed", "add", ip=str(ip))

    def remove(self, ip) -> None:
        self._bypass("IP address removed from whitelist but whitelisting is stubbed", "remove", ip=str(ip))


class NetStub(_Stub, NetACL):
    """Network whitelist that permits everything."""

    kind = "net"

    def add(self, network) -> None:
        self._bypass("IP network added to whitelist but whitelisting is stubbed", "add", network=str(network))

    def remove(self, network) -> None:
        self._bypass("IP network removed from whitelist but whitelisting is stubbed", "remove", network=str(network))
