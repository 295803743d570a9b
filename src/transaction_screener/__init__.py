"""Schema-agnostic transaction anomaly screening."""

__version__ = "0.1.0"
