"""
Whitelist ACL package.

An ACL answers one question, ``permitted(ip)``. Implementations:

- BasicHost: exact-match address whitelist.
- BasicNet: CIDR network whitelist (linear scan, no overlap detection).
- BasicDual: address + network union, sequenced or concurrent.
- HostStub / NetStub: always permit and log an audit warning.

The address and network whitelists share one JSON wire format (see codec)
with a legacy comma-separated string encoding and an array encoding.
"""

from .base import ACL, HostACL, NetACL, to_address, valid_ip
from .codec import JsonFormat, parse_address, parse_cidr
from .dual import BasicDual, LaunchPolicy, new_basic_dual, new_stub_dual
from .factory import build_dual_acl
from .host import BasicHost
from .net import BasicNet
from .stub import HostStub, NetStub

__all__ = [
    # Contracts
    "ACL",
    "HostACL",
    "NetACL",
    "valid_ip",
    "to_address",
    # Codec
    "JsonFormat",
    "parse_cidr",
    "parse_address",
    # Implementations
    "BasicHost",
    "BasicNet",
    "BasicDual",
    "LaunchPolicy",
    "new_basic_dual",
    "new_stub_dual",
    "HostStub",
    "NetStub",
    "build_dual_acl",
]
