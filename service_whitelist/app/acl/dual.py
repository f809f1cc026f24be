"""
Dual whitelist: permits an address that is whitelisted on its own or that
falls inside a whitelisted network.
"""

import json
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from enum import Enum
from typing import Any, Dict, Optional, Union

from shared.errors import ParseError
from shared.logging import get_logger
from shared.metrics import WhitelistMetrics, get_metrics

from .base import ACL, HostACL, NetACL
from .codec import JsonFormat
from .host import BasicHost
from .net import BasicNet
from .stub import HostStub, NetStub


class LaunchPolicy(str, Enum):
    """How the address and network checks are run."""
    SEQUENCED = "sequenced"
    CONCURRENT = "concurrent"


class BasicDual(ACL):
    """Union of an address whitelist and a network whitelist.

    With the sequenced policy the address whitelist is consulted first and
    the network whitelist only when it denies. With the concurrent policy
    both checks run in the worker pool and both are always awaited before
    the results are OR-ed; there is no timeout.

    Overlapping networks are not detected.
    """

    def __init__(self, addresses: HostACL, networks: NetACL,
                 launch_policy: LaunchPolicy = LaunchPolicy.SEQUENCED,
                 max_workers: int = 4, metrics: Optional[WhitelistMetrics] = None):
        self.addresses = addresses
        self.networks = networks
        self.launch_policy = LaunchPolicy(launch_policy)
        self.max_workers = max_workers
        self.logger = get_logger("whitelist.dual")
        self.metrics = metrics or get_metrics()
        self._executor: Optional[ThreadPoolExecutor] = None
        # Guards pool creation, submission and shutdown
        self._executor_lock = threading.Lock()

    def _submit_checks(self, ip):
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="whitelist-dual"
                )
            return (
                self._executor.submit(self.addresses.permitted, ip),
                self._executor.submit(self.networks.permitted, ip),
            )

    def permitted(self, ip) -> bool:
        """Return True if either whitelist permits ``ip``."""
        if self.launch_policy == LaunchPolicy.SEQUENCED:
            allowed = self.addresses.permitted(ip) or self.networks.permitted(ip)
        else:
            host_check, net_check = self._submit_checks(ip)
            wait([host_check, net_check])
            host_allowed = host_check.result()
            net_allowed = net_check.result()
            allowed = host_allowed or net_allowed

        self.metrics.record_check("dual", "permitted" if allowed else "denied")
        return allowed

    def add_address(self, ip) -> None:
        self.addresses.add(ip)

    def add_network(self, network) -> None:
        """Whitelist a network. Overlapping networks won't be detected."""
        self.networks.add(network)

    def remove_address(self, ip) -> None:
        self.addresses.remove(ip)

    def remove_network(self, network) -> None:
        self.networks.remove(network)

    def dump(self) -> Dict[str, Any]:
        return {
            "addresses": self.addresses.dump(),
            "networks": self.networks.dump(),
        }

    def serialize(self) -> bytes:
        """Encode both whitelists as one JSON object."""
        return json.dumps(self.dump(), separators=(",", ":")).encode("utf-8")

    def deserialize(self, data: Union[bytes, str]) -> None:
        """Load both whitelists from a JSON object.

        A missing field loads as an empty whitelist. Each field may use
        either encoding.
        """
        if not isinstance(data, (bytes, bytearray, str)):
            raise ParseError(f"invalid dual whitelist: expected JSON text, got {type(data).__name__}")
        try:
            document = json.loads(data)
        except ValueError as e:
            raise ParseError(f"invalid dual whitelist: {e}") from None
        if not isinstance(document, dict):
            raise ParseError("invalid dual whitelist: expected a JSON object")

        self.addresses.load(document.get("addresses", ""))
        self.networks.load(document.get("networks", ""))

    def close(self) -> None:
        """Shut down the worker pool used by the concurrent policy."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        # Checks already submitted still run to completion
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def new_basic_dual(launch_policy: LaunchPolicy = LaunchPolicy.SEQUENCED,
                   json_format: JsonFormat = JsonFormat.COMPATIBILITY,
                   max_workers: int = 4,
                   metrics: Optional[WhitelistMetrics] = None) -> BasicDual:
    """Construct an empty dual whitelist."""
    return BasicDual(
        addresses=BasicHost(json_format, metrics=metrics),
        networks=BasicNet(json_format, metrics=metrics),
        launch_policy=launch_policy,
        max_workers=max_workers,
        metrics=metrics,
    )


def new_stub_dual(metrics: Optional[WhitelistMetrics] = None) -> BasicDual:
    """Construct a dual whitelist over stubs: everything is permitted and logged."""
    return BasicDual(
        addresses=HostStub(metrics=metrics),
        networks=NetStub(metrics=metrics),
        launch_policy=LaunchPolicy.SEQUENCED,
        metrics=metrics,
    )
