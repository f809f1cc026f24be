"""
ACL contracts and the IP validator shared by every whitelist.
"""

import ipaddress
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def to_address(ip) -> Optional[IPAddress]:
    """Coerce ``ip`` to an address object, or return None if it is not one.

    Accepts address objects, packed bytes (4 or 16 long) and address text.
    IPv4-mapped IPv6 addresses come back in their IPv4 form so they match
    IPv4 networks.
    """
    if ip is None:
        return None

    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        address = ip
    elif isinstance(ip, (bytes, bytearray)):
        if len(ip) not in (4, 16):
            return None
        address = ipaddress.ip_address(bytes(ip))
    elif isinstance(ip, str):
        try:
            address = ipaddress.ip_address(ip.strip())
        except ValueError:
            return None
    else:
        return None

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def valid_ip(ip) -> bool:
    """Return True if ``ip`` can be checked against a whitelist."""
    return to_address(ip) is not None


class ACL:
    """Anything that can answer whether an address is whitelisted."""

    def permitted(self, ip) -> bool:
        raise NotImplementedError


class HostACL(ACL):
    """Whitelist of individual addresses."""

    def add(self, ip) -> None:
        raise NotImplementedError

    def remove(self, ip) -> None:
        raise NotImplementedError


class NetACL(ACL):
    """Whitelist of IP networks.

    Overlapping networks are not detected.
    """

    def add(self, network) -> None:
        raise NotImplementedError

    def remove(self, network) -> None:
        raise NotImplementedError
