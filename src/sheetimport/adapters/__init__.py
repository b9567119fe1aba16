"""Adapters binding the import domain to concrete libraries."""
