"""
Address whitelist: permits exactly the addresses it holds.
"""

from typing import Dict, List, Optional, Union

from shared.errors import ParseError
from shared.locks import ReadWriteLock
from shared.logging import get_logger
from shared.metrics import WhitelistMetrics, get_metrics

from .base import HostACL, IPAddress, to_address
from .codec import JsonFormat, decode_entries, dump_entries, encode_entries, load_entries, parse_address


class BasicHost(HostACL):
    """Exact-match address whitelist guarded by a reader/writer lock."""

    def __init__(self, json_format: JsonFormat = JsonFormat.COMPATIBILITY,
                 metrics: Optional[WhitelistMetrics] = None):
        self.json_format = JsonFormat(json_format)
        self.logger = get_logger("whitelist.host")
        self.metrics = metrics or get_metrics()
        self._lock = ReadWriteLock()
        # Keyed by canonical text; dict keeps insertion order for serialization
        self._whitelist: Dict[str, IPAddress] = {}

    def _coerce(self, ip) -> IPAddress:
        if isinstance(ip, str):
            return parse_address(ip)
        address = to_address(ip)
        if address is None:
            raise ParseError(f"invalid IP address {ip!r}", token=repr(ip))
        return address

    def permitted(self, ip) -> bool:
        """Return True if ``ip`` has been whitelisted."""
        address = to_address(ip)
        if address is None:
            self.logger.debug("Invalid address presented to whitelist", ip=repr(ip))
            self.metrics.record_check("host", "invalid")
            return False

        with self._lock.read_locked():
            allowed = str(address) in self._whitelist

        self.metrics.record_check("host", "permitted" if allowed else "denied")
        return allowed

    def add(self, ip: Union[IPAddress, bytes, str, None]) -> None:
        """Whitelist an address. Malformed text or packed bytes raise ParseError."""
        if ip is None:
            return
        address = self._coerce(ip)

        with self._lock.write_locked():
            self._whitelist[str(address)] = address

        self.metrics.record_mutation("host", "add")
        self.logger.info("Address whitelisted", ip=str(address))

    def remove(self, ip: Union[IPAddress, bytes, str, None]) -> None:
        """Drop an address from the whitelist."""
        if ip is None:
            return
        address = self._coerce(ip)

        with self._lock.write_locked():
            if self._whitelist.pop(str(address), None) is None:
                return

        self.metrics.record_mutation("host", "remove")
        self.logger.info("Address removed from whitelist", ip=str(address))

    def addresses(self) -> List[IPAddress]:
        with self._lock.read_locked():
            return list(self._whitelist.values())

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._whitelist)

    def dump(self) -> Union[str, List[str]]:
        with self._lock.read_locked():
            entries = list(self._whitelist)
        return dump_entries(entries, self.json_format)

    def serialize(self) -> bytes:
        with self._lock.read_locked():
            entries = list(self._whitelist)
        return encode_entries(entries, self.json_format)

    def load(self, value) -> None:
        self._replace(lambda: load_entries(value))

    def deserialize(self, data: Union[bytes, str]) -> None:
        """Replace all addresses from JSON text in either encoding."""
        self._replace(lambda: decode_entries(data))

    def _replace(self, decode) -> None:
        try:
            _, tokens = decode()
            parsed = [parse_address(token) for token in tokens]
        except ParseError as e:
            with self._lock.write_locked():
                self._whitelist = {}
            self.metrics.record_decode_error("host")
            self.logger.warning("Rejected serialized address whitelist", error=e.message, **e.details)
            raise

        entries = {str(address): address for address in parsed}
        with self._lock.write_locked():
            self._whitelist = entries
        self.logger.info("Address whitelist loaded", count=len(entries))
