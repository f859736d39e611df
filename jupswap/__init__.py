"""Async client for the Jupiter swap aggregator HTTP API, with typed quote and swap models."""

__version__ = "0.1.0"

__all__ = ["client", "fields", "quote", "route_plan", "swap", "transaction_config"]