"""Endpoint functions for the GW2 API (internal)."""
