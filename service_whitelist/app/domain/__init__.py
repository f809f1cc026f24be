"""
Domain helpers for services that embed a whitelist.
"""

from .whitelist_middleware import WhitelistMiddleware, extract_client_ip

__all__ = ["WhitelistMiddleware", "extract_client_ip"]
