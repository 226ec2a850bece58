"""Location sharing API."""
