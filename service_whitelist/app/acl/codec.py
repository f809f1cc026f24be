"""
JSON wire format shared by the address and network whitelists.

Two encodings are accepted:

- compatibility: one JSON string of comma-separated entries,
  ``"192.168.3.0/24,192.168.7.0/24"`` (empty whitelist: ``""``)
- new: a JSON array of strings, ``["192.168.3.0/24","192.168.7.0/24"]``
  (empty whitelist: ``[]``)

Output uses the encoding a whitelist was built with. Input is recognised by
its shape alone.
"""

import ipaddress
import json
from enum import Enum
from typing import List, Tuple, Union

from shared.errors import ParseError

from .base import IPAddress, IPNetwork, to_address


class JsonFormat(str, Enum):
    """Serialized whitelist encodings."""
    COMPATIBILITY = "compatibility"
    NEW = "new"


def parse_cidr(text: str) -> IPNetwork:
    """Parse ``addr/prefix`` into a network, masking host bits.

    A bare address without a prefix length is rejected.
    """
    token = text.strip() if isinstance(text, str) else text
    if not isinstance(token, str) or "/" not in token:
        raise ParseError(f"invalid IP network {text}", token=str(text))
    try:
        return ipaddress.ip_network(token, strict=False)
    except ValueError:
        raise ParseError(f"invalid IP network {token}", token=token) from None


def parse_address(text: str) -> IPAddress:
    """Parse a single address; CIDR notation is rejected."""
    address = to_address(text) if isinstance(text, str) else None
    if address is None:
        raise ParseError(f"invalid IP address {text}", token=str(text))
    return address


def dump_entries(entries: List[str], json_format: JsonFormat) -> Union[str, List[str]]:
    """Encode canonical entry strings as a JSON-compatible value."""
    if json_format == JsonFormat.COMPATIBILITY:
        return ",".join(entries)
    if json_format == JsonFormat.NEW:
        return list(entries)
    raise ValueError(f"unsupported JSON format {json_format!r}")


def encode_entries(entries: List[str], json_format: JsonFormat) -> bytes:
    """Encode canonical entry strings as JSON text."""
    value = dump_entries(entries, json_format)
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def load_entries(value) -> Tuple[JsonFormat, List[str]]:
    """Split an already-decoded JSON value into entry tokens.

    Compatibility tokens are trimmed and empty ones dropped. Elements of a
    new-format array are returned untouched.
    """
    if isinstance(value, str):
        tokens = [token.strip() for token in value.strip().split(",")]
        return JsonFormat.COMPATIBILITY, [token for token in tokens if token]

    if isinstance(value, list):
        for item in value:
            if not isinstance(item, str):
                raise ParseError(f"invalid whitelist entry {item!r}", token=repr(item))
        return JsonFormat.NEW, list(value)

    raise ParseError("invalid whitelist: expected a string or an array of strings")


def decode_entries(data: Union[bytes, str]) -> Tuple[JsonFormat, List[str]]:
    """Decode serialized whitelist text into entry tokens.

    The encoding is chosen from the first and last non-whitespace
    characters: ``[...]`` is new, ``"..."`` is compatibility.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"invalid whitelist: {e}") from None
    elif isinstance(data, str):
        text = data
    else:
        raise ParseError(f"invalid whitelist: expected JSON text, got {type(data).__name__}")
    text = text.strip()

    if len(text) >= 2 and text[0] == "[" and text[-1] == "]":
        expected = list
    elif len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        expected = str
    else:
        raise ParseError("invalid whitelist: expected a quoted string or an array")

    try:
        value = json.loads(text)
    except ValueError as e:
        raise ParseError(f"invalid whitelist: {e}") from None

    if not isinstance(value, expected):
        raise ParseError("invalid whitelist: expected a quoted string or an array")
    return load_entries(value)
