"""
Shared utilities for the access-rules evaluator.

This package aggregates the ambient building blocks used by the rule
engine and its callers:

- config: Settings via pydantic-settings
- logging: Structured logging with component and service context
- metrics: Prometheus counters for decisions and condition failures
- errors: Canonical error types and responses

Do not import from access_rules into shared/.
"""
