"""Periodic metrics aggregation for a storage-node process."""

__version__ = "0.1.0"
