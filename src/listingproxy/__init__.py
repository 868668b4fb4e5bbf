"""Caching proxy and table dashboard for commercial real-estate listings."""

__version__ = "1.0.0"
