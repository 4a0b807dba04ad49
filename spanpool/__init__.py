"""Simulated tiered concurrent memory pool with thread, central and page caches."""

__version__ = "0.1.0"