"""Reverse proxy in front of the catalog API, plus the SPA static host."""
