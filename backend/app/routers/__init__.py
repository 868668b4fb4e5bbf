"""API routers."""

from . import listings, reference

__all__ = ["listings", "reference"]
