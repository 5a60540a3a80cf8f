"""Integrations with third-party systems."""
