"""Shared utilities: logging setup, attached subprocess execution and TCP reachability."""
