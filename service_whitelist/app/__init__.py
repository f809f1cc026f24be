"""
Application package for the IP whitelist.

Structure:
- app.acl: ACL implementations and the wire codec.
- app.domain: Cross-cutting helpers for embedding services (middleware).
"""
