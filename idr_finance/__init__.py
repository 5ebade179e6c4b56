"""IDR Finance Data Aggregator — startup-loaded, read-only rate cache."""

__version__ = "1.0.0"
