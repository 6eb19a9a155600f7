"""Adapters for external systems: the document store and the upstream API."""
