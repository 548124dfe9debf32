"""Integrations built on the pagination core."""
