"""
Network whitelist: permits any address inside one of its CIDR networks.
"""

import ipaddress
from typing import List, Optional, Union

from shared.errors import ParseError
from shared.locks import ReadWriteLock
from shared.logging import get_logger
from shared.metrics import WhitelistMetrics, get_metrics

from .base import IPNetwork, NetACL, to_address
from .codec import JsonFormat, decode_entries, dump_entries, encode_entries, load_entries, parse_cidr


def _coerce_network(network) -> IPNetwork:
    if isinstance(network, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return network
    return parse_cidr(network)


class BasicNet(NetACL):
    """Network whitelist guarded by a reader/writer lock.

    Membership is a linear scan over the networks in insertion order, so
    this is meant for small whitelists. Duplicate and overlapping networks
    are kept as added.
    """

    def __init__(self, json_format: JsonFormat = JsonFormat.COMPATIBILITY,
                 metrics: Optional[WhitelistMetrics] = None):
        self.json_format = JsonFormat(json_format)
        self.logger = get_logger("whitelist.net")
        self.metrics = metrics or get_metrics()
        self._lock = ReadWriteLock()
        self._whitelist: List[IPNetwork] = []

    def permitted(self, ip) -> bool:
        """Return True if ``ip`` falls inside a whitelisted network."""
        address = to_address(ip)
        if address is None:
            self.logger.debug("Invalid address presented to whitelist", ip=repr(ip))
            self.metrics.record_check("net", "invalid")
            return False

        allowed = False
        with self._lock.read_locked():
            for network in self._whitelist:
                if address in network:
                    allowed = True
                    break

        self.metrics.record_check("net", "permitted" if allowed else "denied")
        return allowed

    def add(self, network: Union[IPNetwork, str, None]) -> None:
        """Whitelist a network. Overlaps with existing networks are not detected."""
        if network is None:
            return

        network = _coerce_network(network)
        with self._lock.write_locked():
            self._whitelist.append(network)

        self.metrics.record_mutation("net", "add")
        self.logger.info("Network whitelisted", network=str(network))

    def remove(self, network: Union[IPNetwork, str, None]) -> None:
        """Drop the first entry whose CIDR text matches ``network``."""
        if network is None:
            return

        key = str(_coerce_network(network))
        with self._lock.write_locked():
            index = -1
            for i, entry in enumerate(self._whitelist):
                if str(entry) == key:
                    index = i
                    break
            if index == -1:
                return
            del self._whitelist[index]

        self.metrics.record_mutation("net", "remove")
        self.logger.info("Network removed from whitelist", network=key)

    def networks(self) -> List[IPNetwork]:
        """Return a snapshot of the whitelisted networks."""
        with self._lock.read_locked():
            return list(self._whitelist)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._whitelist)

    def dump(self) -> Union[str, List[str]]:
        """Encode as a JSON-compatible value for embedding in a document."""
        with self._lock.read_locked():
            entries = [str(network) for network in self._whitelist]
        return dump_entries(entries, self.json_format)

    def serialize(self) -> bytes:
        """Encode as JSON text in this whitelist's format."""
        with self._lock.read_locked():
            entries = [str(network) for network in self._whitelist]
        return encode_entries(entries, self.json_format)

    def load(self, value) -> None:
        """Replace all networks from a decoded JSON value (string or array)."""
        self._replace(lambda: load_entries(value))

    def deserialize(self, data: Union[bytes, str]) -> None:
        """Replace all networks from JSON text in either encoding.

        On failure the whitelist is left empty and ParseError is raised.
        """
        self._replace(lambda: decode_entries(data))

    def _replace(self, decode) -> None:
        try:
            _, tokens = decode()
            parsed = [parse_cidr(token) for token in tokens]
        except ParseError as e:
            with self._lock.write_locked():
                self._whitelist = []
            self.metrics.record_decode_error("net")
            self.logger.warning("Rejected serialized network whitelist", error=e.message, **e.details)
            raise

        with self._lock.write_locked():
            self._whitelist = parsed
        self.logger.info("Network whitelist loaded", count=len(parsed))
