"""Cross-generation Drone build reconciliation and metrics."""

__version__ = "1.0.0"
