"""
Shared utilities for the IP whitelist access layer.

This package aggregates the ambient building blocks used by the ACL engine
and the gateway middleware:

- config: Whitelist configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus counters for checks, mutations and bypasses
- errors: Canonical error types and responses
- locks: Reader/writer lock guarding shared entry lists

Any cross-package logic should live here to avoid import cycles. Do not
import from service_* packages into shared/.
"""
