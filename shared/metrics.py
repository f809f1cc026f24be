"""
Shared metrics configuration for the IP whitelist access layer.
"""

import threading
from typing import Any, Dict, Optional

from prometheus_client import Counter, CollectorRegistry, REGISTRY


class WhitelistMetrics:
    """Prometheus counters for whitelist decisions and changes."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up whitelist metrics."""
        self._metrics["whitelist_checks_total"] = Counter(
            "whitelist_checks_total",
            "Total whitelist checks",
            ["acl", "result"],
            registry=self.registry
        )

        self._metrics["whitelist_mutations_total"] = Counter(
            "whitelist_mutations_total",
            "Total whitelist entry additions and removals",
            ["acl", "operation"],
            registry=self.registry
        )

        self._metrics["whitelist_decode_errors_total"] = Counter(
            "whitelist_decode_errors_total",
            "Total rejected serialized whitelists",
            ["acl"],
            registry=self.registry
        )

        # Stubbed whitelists permit everything; every bypass is counted
        self._metrics["whitelist_bypass_total"] = Counter(
            "whitelist_bypass_total",
            "Total operations on stubbed whitelists",
            ["operation"],
            registry=self.registry
        )

    def record_check(self, acl: str, result: str):
        """Record a permitted() outcome: permitted, denied or invalid."""
        self._metrics["whitelist_checks_total"].labels(acl=acl, result=result).inc()

    def record_mutation(self, acl: str, operation: str):
        self._metrics["whitelist_mutations_total"].labels(acl=acl, operation=operation).inc()

    def record_decode_error(self, acl: str):
        self._metrics["whitelist_decode_errors_total"].labels(acl=acl).inc()

    def record_bypass(self, operation: str):
        self._metrics["whitelist_bypass_total"].labels(operation=operation).inc()


_default_metrics: Optional[WhitelistMetrics] = None
_default_lock = threading.Lock()


def get_metrics() -> WhitelistMetrics:
    """Get the process-wide metrics collector, registering it on first use."""
    global _default_metrics
    with _default_lock:
        if _default_metrics is None:
            _default_metrics = WhitelistMetrics()
        return _default_metrics
