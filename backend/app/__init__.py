"""FastAPI service for listingproxy."""
