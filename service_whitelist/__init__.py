"""
IP whitelist package for the access layer.

Decides whether a caller's IP address may connect, based on whitelisted
addresses and CIDR networks. It provides:

- app.acl: Address, network and dual ACLs, stubs and the JSON codec.
- app.domain: Gateway middleware that enforces a whitelist per request.

Guidelines:
- Checks fail closed: a malformed address is simply not permitted.
- ACL state lives in process memory; persistence is the caller's job via
  serialize/deserialize.
"""
