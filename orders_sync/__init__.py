"""Orders Database sync: upsert of (Order ID, Invoice #) records from a source sheet."""

__version__ = "0.1.0"
